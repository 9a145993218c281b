"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from oncoshare.db.base import Base
from oncoshare.db.enums import DEFAULT_CASE_STATUS
from oncoshare.db.models._defaults import utcnow


if TYPE_CHECKING:
    from oncoshare.db.models import AnatomicalSite, Clinic, TumourType


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Case(Base):
    """
    One clinical oncology record.

    Owned by a single clinic, readable by every authenticated actor.
    Tumour type and anatomical site are each either a vocabulary reference
    or custom free text, never both.
    """

    __tablename__ = "cases"
    __table_args__ = (
        CheckConstraint(
            "tumour_type_id IS NULL OR tumour_type_custom IS NULL",
            name="ck_cases_tumour_type_exclusive",
        ),
        CheckConstraint(
            "anatomical_site_id IS NULL OR anatomical_site_custom IS NULL",
            name="ck_cases_anatomical_site_exclusive",
        ),
        Index("cases_clinic_idx", "clinic_id"),
        Index("cases_species_idx", "species"),
        Index("cases_tumour_type_idx", "tumour_type_id"),
        Index("cases_outcome_idx", "outcome"),
        Index("cases_diagnosis_date_idx", "diagnosis_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # VC-<year>-<seq>; see oncoshare.domain.case_numbers
    case_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    clinic_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    # Location (free text; zone is derived on read, never stored)
    state: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Patient
    species: Mapped[str] = mapped_column(String(64), nullable=False)
    breed: Mapped[str | None] = mapped_column(String(128), nullable=True)
    sex: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Tumour
    tumour_type_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("tumour_types.id", ondelete="SET NULL"), nullable=True
    )
    tumour_type_custom: Mapped[str | None] = mapped_column(Text, nullable=True)
    anatomical_site_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("anatomical_sites.id", ondelete="SET NULL"), nullable=True
    )
    anatomical_site_custom: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Diagnosis / outcome
    diagnosis_date: Mapped[datetime] = mapped_column(nullable=False)
    outcome: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), default=DEFAULT_CASE_STATUS, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    clinic: Mapped["Clinic"] = relationship()
    tumour_type: Mapped["TumourType | None"] = relationship()
    anatomical_site: Mapped["AnatomicalSite | None"] = relationship()

    @validates("tumour_type_id", "tumour_type_custom")
    def _validate_tumour_type(self, key: str, value):
        return self._exclusive(key, value, "tumour_type_id", "tumour_type_custom")

    @validates("anatomical_site_id", "anatomical_site_custom")
    def _validate_anatomical_site(self, key: str, value):
        return self._exclusive(key, value, "anatomical_site_id", "anatomical_site_custom")

    def _exclusive(self, key: str, value, ref_key: str, custom_key: str):
        if key == custom_key:
            value = _blank_to_none(value)
        other_key = custom_key if key == ref_key else ref_key
        if value is not None and getattr(self, other_key) is not None:
            raise ValueError(f"{ref_key} and {custom_key} are mutually exclusive")
        return value


class FollowUp(Base):
    """Scheduled follow-up visit for a case."""

    __tablename__ = "follow_ups"
    __table_args__ = (
        Index("follow_ups_case_idx", "case_id"),
        Index("follow_ups_scheduled_idx", "scheduled_for"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_for: Mapped[datetime] = mapped_column(nullable=False)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
