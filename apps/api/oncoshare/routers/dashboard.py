"""Dashboard router - headline case statistics."""

from fastapi import APIRouter, Depends

from oncoshare.core.deps import get_stats_aggregator
from oncoshare.routers.filters import case_filter_params
from oncoshare.schemas.case import CaseFilter
from oncoshare.schemas.stats import StatsOut
from oncoshare.services.stats_service import StatsAggregator

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=StatsOut)
async def get_dashboard_stats(
    case_filter: CaseFilter = Depends(case_filter_params),
    aggregator: StatsAggregator = Depends(get_stats_aggregator),
) -> StatsOut:
    """Totals, monthly series and top tumour types; never fails, may carry a warning."""
    result = await aggregator.stats(case_filter, warning="Failed to load dashboard stats")
    return StatsOut(**result.value.model_dump(), warning=result.warning)
