"""Cursor-paginated read of published feed posts."""

from __future__ import annotations

import logging

from sqlalchemy import and_, false, or_, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import Select

from oncoshare.core.async_utils import run_blocking
from oncoshare.core.exceptions import InvalidCursorError
from oncoshare.db.enums import FeedStatus
from oncoshare.db.models import Clinic, FeedPost
from oncoshare.geo.expressions import normalized_region
from oncoshare.geo.zones import ZoneResolver, zone_resolver
from oncoshare.schemas.feed import FeedFilter, FeedItem, FeedPage
from oncoshare.services.result import Result
from oncoshare.utils.datetime_parsing import as_utc, normalize_date_bounds
from oncoshare.utils.pagination import (
    FeedCursor,
    clamp_feed_limit,
    decode_cursor,
    encode_cursor,
)

logger = logging.getLogger(__name__)

FEED_UNAVAILABLE = "Failed to load feed posts"
INVALID_CURSOR = "Invalid feed cursor"


class FeedQueryEngine:
    """
    Shared feed reads, newest first.

    Pages are keyed by (created_at, id) so posts sharing a timestamp are
    neither skipped nor repeated across pages.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        resolver: ZoneResolver = zone_resolver,
    ):
        self._session_factory = session_factory
        self._resolver = resolver

    async def query(
        self,
        feed_filter: FeedFilter | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Result[FeedPage]:
        feed_filter = feed_filter or FeedFilter()
        limit = clamp_feed_limit(limit)

        position: FeedCursor | None = None
        if cursor:
            try:
                position = decode_cursor(cursor)
            except InvalidCursorError:
                logger.warning("Rejected malformed feed cursor")
                return Result.degraded(FeedPage(), INVALID_CURSOR)

        try:
            page = await run_blocking(self._query_in_session, feed_filter, position, limit)
        except Exception:
            logger.warning("Feed query failed; returning empty page", exc_info=True)
            return Result.degraded(FeedPage(), FEED_UNAVAILABLE)
        return Result.ok(page)

    def _query_in_session(
        self, feed_filter: FeedFilter, position: FeedCursor | None, limit: int
    ) -> FeedPage:
        with self._session_factory() as db:
            return self.query_sync(db, feed_filter, position, limit)

    def query_sync(
        self,
        db: Session,
        feed_filter: FeedFilter,
        position: FeedCursor | None,
        limit: int,
    ) -> FeedPage:
        stmt = self.build_statement(feed_filter, position).limit(limit + 1)
        rows = db.execute(stmt).all()

        has_more = len(rows) > limit
        items = [self._to_item(row) for row in rows[:limit]]
        next_cursor = None
        if has_more and items:
            last = items[-1]
            next_cursor = encode_cursor(last.created_at, last.id)
        return FeedPage(items=items, next_cursor=next_cursor)

    def build_statement(
        self, feed_filter: FeedFilter, position: FeedCursor | None = None
    ) -> Select:
        stmt = (
            select(FeedPost, Clinic.name.label("clinic_name"), Clinic.state.label("clinic_state"))
            .outerjoin(Clinic, Clinic.id == FeedPost.clinic_id)
            .where(FeedPost.status == FeedStatus.PUBLISHED.value)
        )

        if feed_filter.clinic_id is not None:
            stmt = stmt.where(
                or_(FeedPost.clinic_id == feed_filter.clinic_id, FeedPost.clinic_id.is_(None))
            )

        clinic_key = normalized_region(Clinic.state)
        if feed_filter.state:
            keys = self._resolver.match_keys_for_states([feed_filter.state])
            stmt = stmt.where(clinic_key.in_(sorted(keys)) if keys else false())
        if feed_filter.zone:
            codes = self._resolver.regions_in_zones([feed_filter.zone])
            keys = self._resolver.match_keys_for_codes(codes)
            stmt = stmt.where(clinic_key.in_(sorted(keys)) if keys else false())

        start_dt, end_dt = normalize_date_bounds(feed_filter.date_from, feed_filter.date_to)
        if start_dt:
            stmt = stmt.where(FeedPost.created_at >= start_dt)
        if end_dt:
            stmt = stmt.where(FeedPost.created_at < end_dt)

        if position is not None:
            stmt = stmt.where(
                or_(
                    FeedPost.created_at < position.created_at,
                    and_(
                        FeedPost.created_at == position.created_at,
                        FeedPost.id < position.post_id,
                    ),
                )
            )

        return stmt.order_by(FeedPost.created_at.desc(), FeedPost.id.desc())

    def _to_item(self, row) -> FeedItem:
        post: FeedPost = row[0]
        return FeedItem(
            id=post.id,
            title=post.title,
            body=post.body,
            clinic_id=post.clinic_id,
            clinic_name=row.clinic_name,
            clinic_state=row.clinic_state,
            geo_zone=self._resolver.zone_of(row.clinic_state) if post.clinic_id else None,
            author_name=post.author_name,
            published_at=as_utc(post.published_at),
            created_at=as_utc(post.created_at),
        )
