"""Value-plus-warning result for read paths that degrade instead of failing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an aggregation.

    ``warning`` is set when the value is a safe fallback (empty/zero) because
    the underlying data could not be read, so callers can tell "no data"
    from "data unavailable".
    """
    value: T
    warning: str | None = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def degraded(cls, value: T, warning: str) -> "Result[T]":
        return cls(value=value, warning=warning)

    @property
    def is_degraded(self) -> bool:
        return self.warning is not None
