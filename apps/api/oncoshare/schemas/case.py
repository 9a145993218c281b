"""Case filter and enriched case row schemas."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable
from uuid import UUID

from pydantic import BaseModel

from oncoshare.domain.vocabulary import VocabularyChoice


def _as_set(values: Iterable | None) -> frozenset | None:
    """None stays None (no filter); any iterable, even empty, becomes a set."""
    if values is None:
        return None
    if isinstance(values, (str, bytes, UUID)):
        return frozenset([values])
    return frozenset(values)


@dataclass(frozen=True)
class CaseFilter:
    """
    Case filter. Every field is optional.

    Multi-value fields use set semantics: OR within a field, AND across
    fields. ``None`` means "no filter"; an empty set means "match nothing"
    (e.g. ``clinic_ids=frozenset()`` returns zero rows). Absence of a clinic
    filter means all clinics (shared reads).
    """
    clinic_ids: frozenset[UUID] | None = None
    species: frozenset[str] | None = None
    outcomes: frozenset[str] | None = None
    start_date: date | None = None
    end_date: date | None = None
    zones: frozenset[str] | None = None
    states: frozenset[str] | None = None
    tumour_type_ids: frozenset[UUID] | None = None
    case_ids: frozenset[UUID] | None = None

    @classmethod
    def build(
        cls,
        *,
        clinic_ids: Iterable[UUID] | None = None,
        species: Iterable[str] | str | None = None,
        outcomes: Iterable[str] | str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        zones: Iterable[str] | None = None,
        states: Iterable[str] | None = None,
        tumour_type_ids: Iterable[UUID] | None = None,
    ) -> "CaseFilter":
        return cls(
            clinic_ids=_as_set(clinic_ids),
            species=_as_set(species),
            outcomes=_as_set(outcomes),
            start_date=start_date,
            end_date=end_date,
            zones=_as_set(zones),
            states=_as_set(states),
            tumour_type_ids=_as_set(tumour_type_ids),
        )

    def for_case(self, case_id: UUID) -> "CaseFilter":
        return replace(self, case_ids=frozenset([case_id]))


class AttachmentSummary(BaseModel):
    """Per-case attachment aggregate (non-deleted files only)."""

    count: int = 0
    first_image_url: str | None = None


class FollowUpSummary(BaseModel):
    """Per-case open follow-up aggregate."""

    open_count: int = 0
    next_scheduled_for: datetime | None = None


class CaseRow(BaseModel):
    """Enriched case row returned by shared case listings."""

    id: UUID
    case_number: str
    clinic_id: UUID
    clinic_name: str | None
    state: str | None
    geo_zone: str
    species: str
    breed: str | None
    sex: str | None
    outcome: str | None
    status: str
    tumour_type: VocabularyChoice
    anatomical_site: VocabularyChoice
    diagnosis_date: datetime
    created_at: datetime
    attachments_count: int = 0
    first_image_url: str | None = None
    follow_ups_count: int = 0
    next_follow_up_at: datetime | None = None


class CaseFileOut(BaseModel):
    id: UUID
    kind: str
    filename: str
    url: str
    mime_type: str | None
    size: int | None
    created_at: datetime


class FollowUpOut(BaseModel):
    id: UUID
    title: str
    description: str | None
    scheduled_for: datetime
    is_completed: bool
    completed_at: datetime | None


class CaseDetail(CaseRow):
    """Single case read: row plus its files and follow-ups."""

    files: list[CaseFileOut] = []
    follow_ups: list[FollowUpOut] = []
    warning: str | None = None
