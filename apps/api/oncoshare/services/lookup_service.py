"""Lookup lists for filter pickers."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from oncoshare.db.models import Clinic, TumourType, ng_states
from oncoshare.geo.zones import ZONES, ZoneResolver, zone_resolver
from oncoshare.schemas.lookup import ClinicOut, RegionOut, TumourTypeOut

logger = logging.getLogger(__name__)

_ZONE_ORDER = {zone: index for index, zone in enumerate(ZONES)}


def _region_sort_key(region: RegionOut) -> tuple[int, str]:
    return _ZONE_ORDER.get(region.zone, len(ZONES)), region.name


def list_regions(
    db: Session,
    has_zone_table: bool,
    resolver: ZoneResolver = zone_resolver,
) -> list[RegionOut]:
    """
    Regions grouped by zone, then by name.

    Read from the zone lookup table when it exists, otherwise from the
    static table it was generated from.
    """
    if has_zone_table:
        try:
            rows = db.execute(
                select(ng_states.c.code, ng_states.c.name, ng_states.c.zone)
            ).all()
            return sorted(
                (RegionOut(code=code, name=name, zone=zone) for code, name, zone in rows),
                key=_region_sort_key,
            )
        except Exception:
            db.rollback()
            logger.warning("Reading zone lookup table failed; using static regions", exc_info=True)

    return sorted(
        (RegionOut(code=r.code, name=r.name, zone=r.zone) for r in resolver.regions),
        key=_region_sort_key,
    )


def load_regions(
    session_factory: sessionmaker[Session],
    has_zone_table: bool,
    resolver: ZoneResolver = zone_resolver,
) -> list[RegionOut]:
    """``list_regions`` on a session of its own; run it through ``run_blocking``."""
    with session_factory() as db:
        return list_regions(db, has_zone_table, resolver)


def list_clinics(db: Session) -> list[ClinicOut]:
    clinics = db.scalars(select(Clinic).order_by(Clinic.name, Clinic.id)).all()
    return [ClinicOut(id=c.id, name=c.name, state=c.state) for c in clinics]


def list_tumour_types(db: Session, species: str | None = None) -> list[TumourTypeOut]:
    """System tumour types, optionally narrowed to one species (plus species-agnostic ones)."""
    stmt = select(TumourType).where(TumourType.is_system.is_(True))
    if species:
        stmt = stmt.where((TumourType.species == species) | TumourType.species.is_(None))
    rows = db.scalars(stmt.order_by(TumourType.name, TumourType.id)).all()
    return [TumourTypeOut(id=t.id, name=t.name) for t in rows]
