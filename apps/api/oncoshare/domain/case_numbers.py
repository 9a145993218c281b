"""Human-readable case numbers: VC-<year>-<sequence>, sequential per calendar year."""

from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from oncoshare.db.models import Case

CASE_NUMBER_PREFIX = "VC"
SEQUENCE_WIDTH = 5

_CASE_NUMBER_RE = re.compile(rf"^{CASE_NUMBER_PREFIX}-(\d{{4}})-(\d+)$")


def format_case_number(year: int, sequence: int) -> str:
    if sequence < 1:
        raise ValueError("sequence must be >= 1")
    return f"{CASE_NUMBER_PREFIX}-{year:04d}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_case_number(case_number: str) -> tuple[int, int] | None:
    """Return (year, sequence), or None if the value is not a case number."""
    match = _CASE_NUMBER_RE.match(case_number or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def next_case_number(db: Session, year: int) -> str:
    """
    Next case number for ``year``.

    Not safe against concurrent writers; the case-entry workflow owns
    allocation in production (database sequence). Used by seeding and tests.
    """
    prefix = f"{CASE_NUMBER_PREFIX}-{year:04d}-"
    existing = db.scalars(
        select(Case.case_number).where(Case.case_number.like(f"{prefix}%"))
    ).all()
    sequences = [parsed[1] for parsed in map(parse_case_number, existing) if parsed]
    return format_case_number(year, max(sequences, default=0) + 1)
