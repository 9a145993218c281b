"""Structured logging helpers (PHI-safe)."""

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the process-wide log format once at start-up."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_log_context(
    *,
    path: str | None = None,
    row_count: int | None = None,
    table: str | None = None,
) -> dict[str, Any]:
    """Return a log ``extra`` dict with only the provided fields.

    ``path`` is the query execution path (``joined`` or ``fallback``), not a URL.
    Never pass case fields here; log lines must stay free of patient data.
    """
    context: dict[str, Any] = {}
    if path:
        context["query_path"] = path
    if row_count is not None:
        context["row_count"] = row_count
    if table:
        context["table"] = table
    return context
