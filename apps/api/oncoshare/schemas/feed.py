"""Feed filter and page schemas."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel


@dataclass(frozen=True)
class FeedFilter:
    """
    Feed filter.

    ``clinic_id`` selects that clinic's posts plus global posts. ``state`` and
    ``zone`` match through the owning clinic's state, so global posts (no
    clinic) are excluded whenever a region filter is set.
    """
    clinic_id: UUID | None = None
    state: str | None = None
    zone: str | None = None
    date_from: date | None = None
    date_to: date | None = None


class FeedItem(BaseModel):
    id: UUID
    title: str
    body: str
    clinic_id: UUID | None
    clinic_name: str | None
    clinic_state: str | None
    geo_zone: str | None
    author_name: str | None
    published_at: datetime | None
    created_at: datetime


class FeedPage(BaseModel):
    items: list[FeedItem] = []
    next_cursor: str | None = None


class FeedPageOut(FeedPage):
    warning: str | None = None
