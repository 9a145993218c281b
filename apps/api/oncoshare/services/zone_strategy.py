"""How a case query derives, filters and sorts by geo-political zone.

Two interchangeable strategies produce the same rows and zone values:

- ``JoinedZoneStrategy`` joins the optional ``ng_states`` lookup table and
  reads the zone from it, falling back to the static table for rows whose
  state text does not match a lookup row.
- ``FallbackZoneStrategy`` never touches ``ng_states``; zone predicates are
  rewritten into region-key predicates and zones are computed in-process.

Both sort by zone with the same expression derived from the static table, so
pages are identical whichever path runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from sqlalchemy import String, false, func, literal, or_
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from oncoshare.db.models import Case, ng_states
from oncoshare.geo.expressions import normalized_region, zone_case_expression
from oncoshare.geo.zones import ZoneResolver, zone_resolver

JOINED_ZONE_LABEL = "joined_zone"


class ZoneStrategy(ABC):
    name: str

    def __init__(self, resolver: ZoneResolver = zone_resolver):
        self.resolver = resolver

    @abstractmethod
    def apply(self, stmt: Select) -> Select:
        """Add the ``joined_zone`` column (and any join it needs) to a case select."""

    @abstractmethod
    def zone_predicate(self, zones: Iterable[str]) -> ColumnElement[bool]:
        """Predicate matching cases in any of ``zones``."""

    @abstractmethod
    def zone_sort_expression(self) -> ColumnElement:
        """Expression to order cases by zone."""

    @abstractmethod
    def resolve_zone(self, state: str | None, joined_zone: str | None) -> str:
        """Zone reported for one result row."""

    def _zone_keys(self, zones: Iterable[str]) -> tuple[list[str], frozenset[str]]:
        canonical = sorted(
            {z for z in (self.resolver.canonical_zone(zone) for zone in zones) if z}
        )
        codes = self.resolver.regions_in_zones(canonical)
        return canonical, self.resolver.match_keys_for_codes(codes)


class JoinedZoneStrategy(ZoneStrategy):
    name = "joined"

    def apply(self, stmt: Select) -> Select:
        state_key = normalized_region(Case.state)
        return stmt.add_columns(ng_states.c.zone.label(JOINED_ZONE_LABEL)).outerjoin(
            ng_states,
            or_(
                state_key == func.lower(ng_states.c.name),
                state_key == func.lower(ng_states.c.code),
            ),
        )

    def zone_predicate(self, zones: Iterable[str]) -> ColumnElement[bool]:
        canonical, keys = self._zone_keys(zones)
        if not canonical:
            return false()
        # Alias spellings never match a lookup row; the key check covers them.
        return or_(
            ng_states.c.zone.in_(canonical),
            normalized_region(Case.state).in_(sorted(keys)),
        )

    def zone_sort_expression(self) -> ColumnElement:
        return func.coalesce(ng_states.c.zone, zone_case_expression(Case.state, self.resolver))

    def resolve_zone(self, state: str | None, joined_zone: str | None) -> str:
        if joined_zone:
            return joined_zone
        return self.resolver.zone_of(state)


class FallbackZoneStrategy(ZoneStrategy):
    name = "fallback"

    def apply(self, stmt: Select) -> Select:
        return stmt.add_columns(literal(None, String).label(JOINED_ZONE_LABEL))

    def zone_predicate(self, zones: Iterable[str]) -> ColumnElement[bool]:
        canonical, keys = self._zone_keys(zones)
        if not keys:
            return false()
        return normalized_region(Case.state).in_(sorted(keys))

    def zone_sort_expression(self) -> ColumnElement:
        return zone_case_expression(Case.state, self.resolver)

    def resolve_zone(self, state: str | None, joined_zone: str | None) -> str:
        return self.resolver.zone_of(state)
