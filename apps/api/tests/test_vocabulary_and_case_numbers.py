"""Tagged vocabulary values, the exclusive (id, custom) pair, and case numbers."""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from oncoshare.db.models import Case
from oncoshare.domain.case_numbers import format_case_number, next_case_number, parse_case_number
from oncoshare.domain.vocabulary import (
    Custom,
    Referenced,
    Unspecified,
    display_name,
    vocabulary_choice,
)


def test_vocabulary_choice_prefers_reference():
    ref_id = uuid.uuid4()

    assert vocabulary_choice(ref_id, "Lymphoma", None) == Referenced(id=ref_id, name="Lymphoma")
    assert vocabulary_choice(None, None, "  Perianal adenoma ") == Custom(text="Perianal adenoma")
    assert vocabulary_choice(None, None, "   ") == Unspecified()
    assert vocabulary_choice(None, None, None) == Unspecified()


def test_display_name_falls_back_to_unknown():
    assert display_name(Referenced(id=uuid.uuid4(), name="Lymphoma")) == "Lymphoma"
    assert display_name(Referenced(id=uuid.uuid4())) == "Unknown"
    assert display_name(Custom(text="Melanoma")) == "Melanoma"
    assert display_name(Unspecified()) == "Unknown"


def test_case_rejects_reference_and_custom_together(factory):
    tumour_type = factory.tumour_type()

    with pytest.raises(ValueError):
        Case(tumour_type_id=tumour_type.id, tumour_type_custom="Something else")


def test_blank_custom_text_is_stored_as_null(factory):
    case = factory.case(factory.clinic(), anatomical_site_custom="   ")

    assert case.anatomical_site_custom is None


def test_database_rejects_both_values_when_validation_is_bypassed(factory, db):
    case = factory.case(factory.clinic())
    site = factory.anatomical_site()

    with pytest.raises(IntegrityError):
        db.execute(
            Case.__table__.update()
            .where(Case.__table__.c.id == case.id)
            .values(anatomical_site_id=site.id, anatomical_site_custom="Flank")
        )
        db.commit()
    db.rollback()


def test_case_number_format_and_parse():
    assert format_case_number(2025, 7) == "VC-2025-00007"
    assert parse_case_number("VC-2025-00007") == (2025, 7)
    assert parse_case_number("VC-2025-123456") == (2025, 123456)
    assert parse_case_number("CASE-7") is None
    with pytest.raises(ValueError):
        format_case_number(2025, 0)


def test_next_case_number_is_sequential_per_year(factory, db):
    clinic = factory.clinic()
    factory.case(clinic, case_number="VC-2025-00041")
    factory.case(clinic, case_number="VC-2024-00099")
    factory.case(clinic, case_number="legacy-import-3", diagnosis_date=datetime(2025, 1, 1, tzinfo=timezone.utc))

    assert next_case_number(db, 2025) == "VC-2025-00042"
    assert next_case_number(db, 2026) == "VC-2026-00001"
