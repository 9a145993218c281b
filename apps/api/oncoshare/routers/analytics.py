"""
Analytics endpoints.

Same statistics as the dashboard, with ``from``/``to`` accepted as aliases
for the diagnosis date range used by the analytics date switcher.
"""

from dataclasses import replace
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from oncoshare.core.deps import get_stats_aggregator
from oncoshare.routers.filters import case_filter_params
from oncoshare.schemas.case import CaseFilter
from oncoshare.schemas.stats import StatsOut
from oncoshare.services.stats_service import StatsAggregator

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/stats", response_model=StatsOut)
async def get_analytics_stats(
    case_filter: CaseFilter = Depends(case_filter_params),
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    aggregator: StatsAggregator = Depends(get_stats_aggregator),
) -> StatsOut:
    if from_date or to_date:
        if from_date and to_date and from_date > to_date:
            raise HTTPException(status_code=422, detail="from must be on or before to")
        case_filter = replace(
            case_filter,
            start_date=from_date or case_filter.start_date,
            end_date=to_date or case_filter.end_date,
        )
    result = await aggregator.stats(case_filter, warning="Failed to load analytics stats")
    return StatsOut(**result.value.model_dump(), warning=result.warning)
