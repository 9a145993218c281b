"""Date helpers shared by the case and feed filters."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def normalize_date_bounds(
    start_date: date | None,
    end_date: date | None,
) -> tuple[datetime | None, datetime | None]:
    """
    Convert an inclusive date range into datetime bounds.

    Returns (start, end) where start is inclusive (midnight UTC) and end is
    exclusive (midnight UTC of the following day).
    """
    if not start_date and not end_date:
        return None, None
    start_dt = (
        datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        if start_date
        else None
    )
    end_dt = (
        datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        if end_date
        else None
    )
    return start_dt, end_dt


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
