"""Cases router - shared case listing and single-case reads."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from oncoshare.core.config import settings
from oncoshare.core.deps import get_case_engine
from oncoshare.core.exceptions import CaseNotFoundError, CaseQueryError
from oncoshare.routers.filters import case_filter_params
from oncoshare.schemas.case import CaseDetail, CaseFilter, CaseRow
from oncoshare.services.case_query_service import CaseQueryEngine
from oncoshare.utils.pagination import CaseSort, PageRequest, SortKey, SortOrder

router = APIRouter(prefix="/cases", tags=["cases"])


@router.get("", response_model=list[CaseRow])
async def list_cases(
    case_filter: CaseFilter = Depends(case_filter_params),
    sort: SortKey = Query(SortKey.DATE),
    order: SortOrder = Query(SortOrder.DESC),
    limit: Optional[int] = Query(None, ge=1, le=settings.CASE_MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    engine: CaseQueryEngine = Depends(get_case_engine),
):
    """
    List cases across all clinics.

    Omitting ``clinic_id`` lists every clinic's cases; ``clinic_id=`` with no
    value lists none.
    """
    try:
        return await engine.query(
            case_filter,
            CaseSort(key=sort, order=order),
            PageRequest.create(offset, limit),
        )
    except CaseQueryError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{case_id}", response_model=CaseDetail)
async def get_case(
    case_id: UUID,
    engine: CaseQueryEngine = Depends(get_case_engine),
):
    try:
        return await engine.get_case(case_id)
    except CaseNotFoundError:
        raise HTTPException(status_code=404, detail="Case not found")
    except CaseQueryError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
