"""Dashboard and analytics statistics.

Stats are a pure fold over the shared case query result: the filtered case
set is fetched once, unpaginated and un-enriched, then reduced in-process.
No aggregation runs in SQL, so the numbers always agree with what the case
listing shows for the same filter.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Iterable

from oncoshare.core.config import settings
from oncoshare.domain.vocabulary import display_name
from oncoshare.schemas.case import CaseFilter, CaseRow
from oncoshare.schemas.stats import CaseStats, MonthCount, NameCount, StatsTotals
from oncoshare.services.case_query_service import CaseQueryEngine
from oncoshare.services.result import Result
from oncoshare.utils.datetime_parsing import as_utc
from oncoshare.utils.pagination import PageRequest

logger = logging.getLogger(__name__)

STATS_UNAVAILABLE = "Failed to load case statistics"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ranked(counter: Counter, limit: int | None = None) -> list[NameCount]:
    """Highest count first, ties by name."""
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ranked = ranked[:limit]
    return [NameCount(name=name, count=count) for name, count in ranked]


def remission_rate(outcomes: Iterable[str | None], remission_outcome: str) -> int:
    """Percent of rows with a known outcome that are in remission, rounded half up."""
    known = [outcome for outcome in outcomes if outcome]
    if not known:
        return 0
    remission = sum(1 for outcome in known if outcome == remission_outcome)
    return int(math.floor(remission * 100 / len(known) + 0.5))


def reduce_case_rows(
    rows: list[CaseRow],
    now: datetime,
    *,
    top_limit: int | None = None,
    remission_outcome: str | None = None,
) -> CaseStats:
    """Fold case rows into dashboard statistics."""
    if top_limit is None:
        top_limit = settings.TOP_TUMOUR_TYPES_LIMIT
    if remission_outcome is None:
        remission_outcome = settings.REMISSION_OUTCOME

    now = as_utc(now)
    by_month: Counter = Counter()
    by_tumour_type: Counter = Counter()
    by_zone: Counter = Counter()
    by_species: Counter = Counter()
    new_this_month = 0

    for row in rows:
        diagnosed = as_utc(row.diagnosis_date)
        if diagnosed.year == now.year and diagnosed.month == now.month:
            new_this_month += 1
        by_month[diagnosed.strftime("%Y-%m")] += 1
        by_tumour_type[display_name(row.tumour_type)] += 1
        by_zone[row.geo_zone] += 1
        by_species[row.species] += 1

    totals = StatsTotals(
        total_cases=len(rows),
        new_this_month=new_this_month,
        remission_rate=remission_rate((row.outcome for row in rows), remission_outcome),
        active_clinics=len({row.clinic_id for row in rows}),
    )
    return CaseStats(
        totals=totals,
        cases_by_month=[
            MonthCount(month=month, count=count) for month, count in sorted(by_month.items())
        ],
        top_tumour_types=_ranked(by_tumour_type, top_limit),
        cases_by_zone=_ranked(by_zone),
        cases_by_species=_ranked(by_species),
    )


class StatsAggregator:
    def __init__(
        self,
        case_engine: CaseQueryEngine,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._case_engine = case_engine
        self._clock = clock

    async def stats(
        self,
        case_filter: CaseFilter | None = None,
        *,
        warning: str = STATS_UNAVAILABLE,
    ) -> Result[CaseStats]:
        """Stats for every case matching ``case_filter``; zeros plus ``warning`` on failure."""
        try:
            rows = await self._case_engine.query(
                case_filter, page=PageRequest.unbounded(), enrich=False
            )
            stats = reduce_case_rows(rows, self._clock())
        except Exception:
            logger.warning("Case statistics failed; returning empty stats", exc_info=True)
            return Result.degraded(CaseStats.empty(), warning)
        return Result.ok(stats)
