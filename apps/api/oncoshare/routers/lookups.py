"""Lookup lists for filter pickers (regions, clinics, tumour types)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.core.async_utils import run_blocking
from oncoshare.core.deps import get_capabilities, get_db, get_session_factory
from oncoshare.schemas.lookup import ClinicOut, RegionOut, TumourTypeOut
from oncoshare.services import lookup_service
from oncoshare.services.capability_service import CapabilityDetector

router = APIRouter(prefix="/lookups", tags=["lookups"])


@router.get("/regions", response_model=list[RegionOut])
async def get_regions(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    capabilities: CapabilityDetector = Depends(get_capabilities),
):
    has_zone_table = await capabilities.has_zone_table()
    return await run_blocking(lookup_service.load_regions, session_factory, has_zone_table)


@router.get("/clinics", response_model=list[ClinicOut])
def get_clinics(db: Session = Depends(get_db)):
    return lookup_service.list_clinics(db)


@router.get("/tumour-types", response_model=list[TumourTypeOut])
def get_tumour_types(
    species: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return lookup_service.list_tumour_types(db, species)
