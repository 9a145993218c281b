"""Shared case listing: filter composition, zone derivation, enrichment.

One engine serves listings, single-case reads and statistics. Zone handling
is delegated to a ``ZoneStrategy``. The joined strategy runs when the
capability detector reports the zone lookup table; any error on that path is
retried once on the fallback strategy, and only a fallback failure is raised
(``CaseQueryError``).

Rows are fetched with one bulk query, then attachment and follow-up
aggregates are merged in with a constant number of extra queries.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import false, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from oncoshare.core.async_utils import run_blocking
from oncoshare.core.exceptions import CaseNotFoundError, CaseQueryError
from oncoshare.core.structured_logging import build_log_context
from oncoshare.db.models import AnatomicalSite, Case, Clinic, TumourType
from oncoshare.domain.vocabulary import vocabulary_choice
from oncoshare.geo.expressions import normalized_region
from oncoshare.geo.zones import ZoneResolver, zone_resolver
from oncoshare.schemas.case import CaseDetail, CaseFilter, CaseRow
from oncoshare.services.attachment_aggregator import AttachmentAggregator
from oncoshare.services.capability_service import CapabilityDetector
from oncoshare.services.follow_up_aggregator import FollowUpAggregator
from oncoshare.services.zone_strategy import (
    JOINED_ZONE_LABEL,
    FallbackZoneStrategy,
    JoinedZoneStrategy,
    ZoneStrategy,
)
from oncoshare.utils.datetime_parsing import as_utc, normalize_date_bounds
from oncoshare.utils.pagination import CaseSort, PageRequest, SortKey

logger = logging.getLogger(__name__)


def _in_set(column, values: frozenset) -> ColumnElement[bool]:
    """``column IN values``; an empty set matches nothing."""
    if not values:
        return false()
    return column.in_(sorted(values, key=str))


class CaseQueryEngine:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        capabilities: CapabilityDetector,
        *,
        resolver: ZoneResolver = zone_resolver,
        attachments: AttachmentAggregator | None = None,
        follow_ups: FollowUpAggregator | None = None,
        joined_strategy: ZoneStrategy | None = None,
        fallback_strategy: ZoneStrategy | None = None,
    ):
        self._session_factory = session_factory
        self._capabilities = capabilities
        self._resolver = resolver
        self._attachments = attachments or AttachmentAggregator(session_factory)
        self._follow_ups = follow_ups or FollowUpAggregator(session_factory)
        self.joined_strategy = joined_strategy or JoinedZoneStrategy(resolver)
        self.fallback_strategy = fallback_strategy or FallbackZoneStrategy(resolver)

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def query(
        self,
        case_filter: CaseFilter | None = None,
        sort: CaseSort | None = None,
        page: PageRequest | None = None,
        *,
        enrich: bool = True,
    ) -> list[CaseRow]:
        """
        Run a shared case query.

        ``page=None`` uses the default page size; pass ``PageRequest.unbounded()``
        to fetch every matching row. ``enrich=False`` skips the attachment and
        follow-up aggregates.
        """
        case_filter = case_filter or CaseFilter()
        sort = sort or CaseSort()
        page = page or PageRequest.default()

        rows: list[CaseRow] | None = None
        if await self._capabilities.has_zone_table():
            try:
                rows = await self._run(self.joined_strategy, case_filter, sort, page)
            except Exception:
                logger.warning(
                    "Joined zone query failed; retrying on fallback path",
                    exc_info=True,
                    extra=build_log_context(path=self.joined_strategy.name),
                )
        if rows is None:
            try:
                rows = await self._run(self.fallback_strategy, case_filter, sort, page)
            except Exception as exc:
                logger.exception(
                    "Fallback case query failed",
                    extra=build_log_context(path=self.fallback_strategy.name),
                )
                raise CaseQueryError("Failed to load cases") from exc

        if enrich:
            await self._enrich(rows)
        return rows

    async def get_case(self, case_id: uuid.UUID) -> CaseDetail:
        """Single enriched case with its files and follow-ups."""
        rows = await self.query(
            CaseFilter().for_case(case_id), page=PageRequest(offset=0, limit=1)
        )
        if not rows:
            raise CaseNotFoundError(case_id)

        files = await self._attachments.list_files(case_id)
        follow_ups = await self._follow_ups.list_for_case(case_id)
        return CaseDetail(
            **rows[0].model_dump(),
            files=files.value,
            follow_ups=follow_ups.value,
            warning=files.warning or follow_ups.warning,
        )

    async def _run(
        self,
        strategy: ZoneStrategy,
        case_filter: CaseFilter,
        sort: CaseSort,
        page: PageRequest,
    ) -> list[CaseRow]:
        rows = await run_blocking(self._query_in_session, strategy, case_filter, sort, page)
        logger.debug(
            "Case query complete",
            extra=build_log_context(path=strategy.name, row_count=len(rows)),
        )
        return rows

    def _query_in_session(
        self,
        strategy: ZoneStrategy,
        case_filter: CaseFilter,
        sort: CaseSort,
        page: PageRequest,
    ) -> list[CaseRow]:
        with self._session_factory() as db:
            return self.query_sync(db, strategy, case_filter, sort, page)

    async def _enrich(self, rows: list[CaseRow]) -> None:
        if not rows:
            return
        case_ids = [row.id for row in rows]
        attachments = (await self._attachments.aggregate(case_ids)).value
        follow_ups = (await self._follow_ups.aggregate(case_ids)).value
        for row in rows:
            attachment = attachments.get(row.id)
            if attachment is not None:
                row.attachments_count = attachment.count
                row.first_image_url = attachment.first_image_url
            follow_up = follow_ups.get(row.id)
            if follow_up is not None:
                row.follow_ups_count = follow_up.open_count
                row.next_follow_up_at = as_utc(follow_up.next_scheduled_for)

    # -------------------------------------------------------------------------
    # Sync building blocks
    # -------------------------------------------------------------------------

    def query_sync(
        self,
        db: Session,
        strategy: ZoneStrategy,
        case_filter: CaseFilter | None = None,
        sort: CaseSort | None = None,
        page: PageRequest | None = None,
    ) -> list[CaseRow]:
        """Fetch un-enriched rows on one strategy, without retry."""
        stmt = self.build_statement(
            strategy,
            case_filter or CaseFilter(),
            sort or CaseSort(),
            page or PageRequest.default(),
        )
        return [self._to_row(strategy, row) for row in db.execute(stmt)]

    def build_statement(
        self,
        strategy: ZoneStrategy,
        case_filter: CaseFilter,
        sort: CaseSort,
        page: PageRequest,
    ) -> Select:
        stmt = (
            select(
                Case,
                Clinic.name.label("clinic_name"),
                TumourType.name.label("tumour_type_name"),
                AnatomicalSite.name.label("anatomical_site_name"),
            )
            .select_from(Case)
            .outerjoin(Clinic, Clinic.id == Case.clinic_id)
            .outerjoin(TumourType, TumourType.id == Case.tumour_type_id)
            .outerjoin(AnatomicalSite, AnatomicalSite.id == Case.anatomical_site_id)
        )
        stmt = strategy.apply(stmt)

        clauses = self._filter_clauses(strategy, case_filter)
        if clauses:
            stmt = stmt.where(*clauses)

        stmt = stmt.order_by(*self._order_by(strategy, sort))
        if page.offset:
            stmt = stmt.offset(page.offset)
        if page.limit is not None:
            stmt = stmt.limit(page.limit)
        return stmt

    def _filter_clauses(
        self, strategy: ZoneStrategy, case_filter: CaseFilter
    ) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []

        if case_filter.case_ids is not None:
            clauses.append(_in_set(Case.id, case_filter.case_ids))
        if case_filter.clinic_ids is not None:
            clauses.append(_in_set(Case.clinic_id, case_filter.clinic_ids))
        if case_filter.species is not None:
            clauses.append(_in_set(Case.species, case_filter.species))
        if case_filter.outcomes is not None:
            clauses.append(_in_set(Case.outcome, case_filter.outcomes))
        if case_filter.tumour_type_ids is not None:
            clauses.append(_in_set(Case.tumour_type_id, case_filter.tumour_type_ids))

        start_dt, end_dt = normalize_date_bounds(case_filter.start_date, case_filter.end_date)
        if start_dt:
            clauses.append(Case.diagnosis_date >= start_dt)
        if end_dt:
            clauses.append(Case.diagnosis_date < end_dt)

        if case_filter.zones is not None:
            clauses.append(strategy.zone_predicate(case_filter.zones))
        if case_filter.states is not None:
            keys = self._resolver.match_keys_for_states(case_filter.states)
            clauses.append(_in_set(normalized_region(Case.state), keys))

        return clauses

    def _order_by(self, strategy: ZoneStrategy, sort: CaseSort) -> list[ColumnElement]:
        sort_columns = {
            SortKey.CLINIC: Clinic.name,
            SortKey.ZONE: strategy.zone_sort_expression(),
            SortKey.STATE: Case.state,
            SortKey.CASE_NUMBER: Case.case_number,
            SortKey.DATE: Case.diagnosis_date,
        }
        primary = sort_columns[sort.key]
        order = [primary.desc() if sort.descending else primary.asc()]
        # Tie-breakers keep pages stable; case_number is unique.
        if sort.key != SortKey.DATE:
            order.append(Case.diagnosis_date.desc())
        if sort.key != SortKey.CASE_NUMBER:
            order.append(Case.case_number.desc())
        return order

    def _to_row(self, strategy: ZoneStrategy, row) -> CaseRow:
        case: Case = row[0]
        return CaseRow(
            id=case.id,
            case_number=case.case_number,
            clinic_id=case.clinic_id,
            clinic_name=row.clinic_name,
            state=case.state,
            geo_zone=strategy.resolve_zone(case.state, row._mapping[JOINED_ZONE_LABEL]),
            species=case.species,
            breed=case.breed,
            sex=case.sex,
            outcome=case.outcome,
            status=case.status,
            tumour_type=vocabulary_choice(
                case.tumour_type_id, row.tumour_type_name, case.tumour_type_custom
            ),
            anatomical_site=vocabulary_choice(
                case.anatomical_site_id, row.anatomical_site_name, case.anatomical_site_custom
            ),
            diagnosis_date=as_utc(case.diagnosis_date),
            created_at=as_utc(case.created_at),
        )
