"""Query-string parsing shared by the case, dashboard and analytics routers.

Multi-value parameters repeat (``?zone=South West&zone=South South``). An
absent parameter means no filter; a parameter sent with only empty values
(``?clinic_id=``) is an empty filter that matches nothing.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, Query

from oncoshare.schemas.case import CaseFilter


def _values(raw: Optional[list[str]]) -> Optional[list[str]]:
    if raw is None:
        return None
    return [value.strip() for value in raw if value and value.strip()]


def _uuids(raw: Optional[list[str]], field: str) -> Optional[list[UUID]]:
    values = _values(raw)
    if values is None:
        return None
    try:
        return [UUID(value) for value in values]
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid {field}")


def case_filter_params(
    clinic_id: Optional[list[str]] = Query(None, description="Owning clinic id (repeatable)"),
    species: Optional[list[str]] = Query(None),
    outcome: Optional[list[str]] = Query(None),
    start_date: Optional[date] = Query(None, description="Diagnosis date from (inclusive)"),
    end_date: Optional[date] = Query(None, description="Diagnosis date to (inclusive)"),
    zone: Optional[list[str]] = Query(None, description="Geo-political zone (repeatable)"),
    state: Optional[list[str]] = Query(None, description="State name or code (repeatable)"),
    tumour_type_id: Optional[list[str]] = Query(None),
) -> CaseFilter:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be on or before end_date")
    return CaseFilter.build(
        clinic_ids=_uuids(clinic_id, "clinic_id"),
        species=_values(species),
        outcomes=_values(outcome),
        start_date=start_date,
        end_date=end_date,
        zones=_values(zone),
        states=_values(state),
        tumour_type_ids=_uuids(tumour_type_id, "tumour_type_id"),
    )
