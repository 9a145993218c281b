"""Per-case attachment counts and thumbnails, computed in bulk.

At most two queries per call regardless of how many cases are requested:
one grouped count, one ordered image scan. Soft-deleted files are excluded
from both. Attachment metadata is best-effort: failures yield an empty
mapping with a warning instead of failing the caller's case query.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.core.async_utils import run_blocking
from oncoshare.db.enums import FileKind
from oncoshare.db.models import CaseFile
from oncoshare.schemas.case import AttachmentSummary, CaseFileOut
from oncoshare.services.result import Result
from oncoshare.services.storage_url_service import build_file_url

logger = logging.getLogger(__name__)

ATTACHMENTS_UNAVAILABLE = "Attachment details are temporarily unavailable"


class AttachmentAggregator:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        url_builder: Callable[[str], str] = build_file_url,
    ):
        self._session_factory = session_factory
        self._url_builder = url_builder

    async def aggregate(
        self, case_ids: Iterable[uuid.UUID]
    ) -> Result[dict[uuid.UUID, AttachmentSummary]]:
        ids = list(dict.fromkeys(case_ids))
        if not ids:
            return Result.ok({})
        try:
            aggregates = await run_blocking(self._aggregate_in_session, ids)
        except Exception:
            logger.warning(
                "Attachment aggregation failed case_count=%s", len(ids), exc_info=True
            )
            return Result.degraded({}, ATTACHMENTS_UNAVAILABLE)
        return Result.ok(aggregates)

    def _aggregate_in_session(
        self, case_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, AttachmentSummary]:
        with self._session_factory() as db:
            return self.aggregate_sync(db, case_ids)

    def aggregate_sync(
        self, db: Session, case_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, AttachmentSummary]:
        """Run the two bulk queries on an existing session."""
        if not case_ids:
            return {}

        active = (CaseFile.case_id.in_(case_ids), CaseFile.deleted_at.is_(None))

        counts = db.execute(
            select(CaseFile.case_id, func.count(CaseFile.id))
            .where(*active)
            .group_by(CaseFile.case_id)
        ).all()
        aggregates = {
            case_id: AttachmentSummary(count=int(file_count or 0))
            for case_id, file_count in counts
        }

        # Newest image first per case; the first row seen for a case wins.
        image_rows = db.execute(
            select(CaseFile.case_id, CaseFile.storage_key)
            .where(*active, CaseFile.kind == FileKind.IMAGE.value)
            .order_by(CaseFile.case_id, CaseFile.created_at.desc(), CaseFile.id.desc())
        ).all()
        seen: set[uuid.UUID] = set()
        for case_id, storage_key in image_rows:
            if case_id in seen:
                continue
            seen.add(case_id)
            summary = aggregates.setdefault(case_id, AttachmentSummary())
            summary.first_image_url = self._url_builder(storage_key)

        return aggregates

    async def list_files(self, case_id: uuid.UUID) -> Result[list[CaseFileOut]]:
        """Non-deleted files of one case, newest first."""
        try:
            files = await run_blocking(self._list_files_in_session, case_id)
        except Exception:
            logger.warning("Listing case files failed case_id=%s", case_id, exc_info=True)
            return Result.degraded([], ATTACHMENTS_UNAVAILABLE)
        return Result.ok(files)

    def _list_files_in_session(self, case_id: uuid.UUID) -> list[CaseFileOut]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(CaseFile)
                .where(CaseFile.case_id == case_id, CaseFile.deleted_at.is_(None))
                .order_by(CaseFile.created_at.desc(), CaseFile.id.desc())
            ).all()
            return [
                CaseFileOut(
                    id=row.id,
                    kind=row.kind,
                    filename=row.filename,
                    url=self._url_builder(row.storage_key),
                    mime_type=row.mime_type,
                    size=row.size,
                    created_at=row.created_at,
                )
                for row in rows
            ]
