"""Open follow-up counts per case, computed with one grouped query."""

from __future__ import annotations

import logging
import uuid
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.core.async_utils import run_blocking
from oncoshare.db.models import FollowUp
from oncoshare.schemas.case import FollowUpOut, FollowUpSummary
from oncoshare.services.result import Result

logger = logging.getLogger(__name__)

FOLLOW_UPS_UNAVAILABLE = "Follow-up details are temporarily unavailable"


class FollowUpAggregator:
    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    async def aggregate(
        self, case_ids: Iterable[uuid.UUID]
    ) -> Result[dict[uuid.UUID, FollowUpSummary]]:
        ids = list(dict.fromkeys(case_ids))
        if not ids:
            return Result.ok({})
        try:
            summaries = await run_blocking(self._aggregate_in_session, ids)
        except Exception:
            logger.warning(
                "Follow-up aggregation failed case_count=%s", len(ids), exc_info=True
            )
            return Result.degraded({}, FOLLOW_UPS_UNAVAILABLE)
        return Result.ok(summaries)

    def _aggregate_in_session(
        self, case_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, FollowUpSummary]:
        with self._session_factory() as db:
            rows = db.execute(
                select(
                    FollowUp.case_id,
                    func.count(FollowUp.id),
                    func.min(FollowUp.scheduled_for),
                )
                .where(FollowUp.case_id.in_(case_ids), FollowUp.is_completed.is_(False))
                .group_by(FollowUp.case_id)
            ).all()
        return {
            case_id: FollowUpSummary(open_count=int(open_count or 0), next_scheduled_for=next_at)
            for case_id, open_count, next_at in rows
        }

    async def list_for_case(self, case_id: uuid.UUID) -> Result[list[FollowUpOut]]:
        try:
            follow_ups = await run_blocking(self._list_in_session, case_id)
        except Exception:
            logger.warning("Listing follow-ups failed case_id=%s", case_id, exc_info=True)
            return Result.degraded([], FOLLOW_UPS_UNAVAILABLE)
        return Result.ok(follow_ups)

    def _list_in_session(self, case_id: uuid.UUID) -> list[FollowUpOut]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(FollowUp)
                .where(FollowUp.case_id == case_id)
                .order_by(FollowUp.scheduled_for.desc())
            ).all()
            return [
                FollowUpOut(
                    id=row.id,
                    title=row.title,
                    description=row.description,
                    scheduled_for=row.scheduled_for,
                    is_completed=row.is_completed,
                    completed_at=row.completed_at,
                )
                for row in rows
            ]
