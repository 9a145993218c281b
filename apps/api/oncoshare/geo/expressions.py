"""SQL counterparts of the in-process region normalization."""

from __future__ import annotations

from sqlalchemy import case, func, literal
from sqlalchemy.sql.elements import ColumnElement

from oncoshare.geo.zones import UNKNOWN_ZONE, ZoneResolver


def normalized_region(column) -> ColumnElement:
    """SQL mirror of ``normalize_region_text``: replace -/_, trim, lowercase."""
    replaced = func.replace(func.replace(column, "-", " "), "_", " ")
    return func.lower(func.trim(replaced))


def zone_case_expression(column, resolver: ZoneResolver) -> ColumnElement:
    """CASE expression computing the zone of a region column from the static table."""
    mapping = resolver.zone_by_match_key()
    if not mapping:
        return literal(UNKNOWN_ZONE)
    return case(mapping, value=normalized_region(column), else_=literal(UNKNOWN_ZONE))
