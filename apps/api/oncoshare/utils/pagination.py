"""Pagination utilities: offset/limit pages for cases, opaque cursors for feeds."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from oncoshare.core.config import settings
from oncoshare.core.exceptions import InvalidCursorError


class SortKey(str, Enum):
    CLINIC = "clinic"
    ZONE = "zone"
    STATE = "state"
    CASE_NUMBER = "case_number"
    DATE = "date"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class CaseSort:
    """Sort order for case listings (default: diagnosis date, newest first)."""
    key: SortKey = SortKey.DATE
    order: SortOrder = SortOrder.DESC

    @property
    def descending(self) -> bool:
        return self.order == SortOrder.DESC


@dataclass(frozen=True)
class PageRequest:
    """Offset/limit window. ``limit=None`` means unbounded (stats)."""
    offset: int = 0
    limit: int | None = None

    @classmethod
    def default(cls) -> "PageRequest":
        return cls(offset=0, limit=settings.CASE_PAGE_SIZE)

    @classmethod
    def unbounded(cls) -> "PageRequest":
        return cls(offset=0, limit=None)

    @classmethod
    def create(cls, offset: int | None, limit: int | None) -> "PageRequest":
        """Build a page from request values, applying the default and max page size."""
        if limit is None or limit <= 0:
            limit = settings.CASE_PAGE_SIZE
        return cls(
            offset=max(offset or 0, 0),
            limit=min(limit, settings.CASE_MAX_PAGE_SIZE),
        )


def clamp_feed_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return settings.FEED_PAGE_SIZE
    return min(limit, settings.FEED_MAX_PAGE_SIZE)


# =============================================================================
# Feed cursors
# =============================================================================


@dataclass(frozen=True)
class FeedCursor:
    """Position after the last-seen post: its creation time, id as tie-breaker."""
    created_at: datetime
    post_id: UUID


def encode_cursor(created_at: datetime, post_id: UUID) -> str:
    payload = json.dumps({"t": created_at.isoformat(), "id": str(post_id)}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> FeedCursor:
    """Decode an opaque cursor. Raises InvalidCursorError on malformed input."""
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode()).decode())
        created_at = datetime.fromisoformat(data["t"])
        post_id = UUID(data["id"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
        raise InvalidCursorError("Malformed feed cursor") from exc
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return FeedCursor(created_at=created_at, post_id=post_id)
