"""Data normalization utilities for region and zone matching.

Region text is matched after ``normalize_region_text``. The same steps are
expressed in SQL by ``oncoshare.geo.expressions.normalized_region`` so an
in-process match and a database-side match always agree:

    replace "-" and "_" with " "  ->  trim spaces  ->  lowercase

Inner whitespace is kept as-is; SQL ``TRIM`` only strips the ends.
"""

from typing import Optional


def normalize_region_text(value: Optional[str]) -> str:
    """
    Normalize free-text region/state input for lookup.

    Examples:
        " Lagos "    -> "lagos"
        "AKWA_IBOM"  -> "akwa ibom"
        "Cross-River" -> "cross river"
    """
    if not value:
        return ""
    return value.replace("-", " ").replace("_", " ").strip(" ").lower()


def normalize_zone_text(value: Optional[str]) -> str:
    """Normalize a zone name or slug ("south_west", "South West") for lookup."""
    return normalize_region_text(value)
