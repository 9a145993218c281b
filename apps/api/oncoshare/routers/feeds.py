"""Feeds router - cursor-paginated shared announcements."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from oncoshare.core.config import settings
from oncoshare.core.deps import get_feed_engine
from oncoshare.schemas.feed import FeedFilter, FeedPageOut
from oncoshare.services.feed_query_service import FeedQueryEngine

router = APIRouter(prefix="/feeds", tags=["feeds"])


@router.get("", response_model=FeedPageOut)
async def list_feed_posts(
    clinic_id: Optional[UUID] = Query(None, description="Clinic posts plus global posts"),
    state: Optional[str] = Query(None),
    zone: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    limit: Optional[int] = Query(None, ge=1, le=settings.FEED_MAX_PAGE_SIZE),
    cursor: Optional[str] = Query(None),
    engine: FeedQueryEngine = Depends(get_feed_engine),
) -> FeedPageOut:
    """Published posts, newest first. Failures return an empty page with a warning."""
    result = await engine.query(
        FeedFilter(
            clinic_id=clinic_id,
            state=state,
            zone=zone,
            date_from=date_from,
            date_to=date_to,
        ),
        cursor=cursor,
        limit=limit,
    )
    return FeedPageOut(
        items=result.value.items,
        next_cursor=result.value.next_cursor,
        warning=result.warning,
    )
