"""Dashboard statistics: pure reductions and the degrade path."""
import uuid
from datetime import datetime, timezone

import pytest

from oncoshare.domain.vocabulary import Custom, Referenced, Unspecified
from oncoshare.geo.zones import NORTH_WEST, SOUTH_WEST
from oncoshare.schemas.case import CaseFilter, CaseRow
from oncoshare.services.stats_service import (
    STATS_UNAVAILABLE,
    StatsAggregator,
    reduce_case_rows,
    remission_rate,
)

NOW = datetime(2025, 6, 15, 9, 30, tzinfo=timezone.utc)


def _row(
    diagnosis_date: datetime,
    clinic_id: uuid.UUID | None = None,
    outcome: str | None = None,
    tumour_type=None,
    geo_zone: str = SOUTH_WEST,
    species: str = "Canine",
) -> CaseRow:
    return CaseRow(
        id=uuid.uuid4(),
        case_number="VC-2025-00001",
        clinic_id=clinic_id or uuid.uuid4(),
        clinic_name="Clinic",
        state="Lagos",
        geo_zone=geo_zone,
        species=species,
        breed=None,
        sex=None,
        outcome=outcome,
        status="ACTIVE",
        tumour_type=tumour_type or Unspecified(),
        anatomical_site=Unspecified(),
        diagnosis_date=diagnosis_date,
        created_at=diagnosis_date,
    )


def test_empty_rows_reduce_to_zeros():
    stats = reduce_case_rows([], NOW)

    assert stats.totals.model_dump() == {
        "total_cases": 0,
        "new_this_month": 0,
        "remission_rate": 0,
        "active_clinics": 0,
    }
    assert stats.cases_by_month == []
    assert stats.top_tumour_types == []


def test_totals_and_month_series():
    clinic = uuid.uuid4()
    rows = [
        _row(datetime(2025, 6, 1, tzinfo=timezone.utc), clinic, "REMISSION"),
        _row(datetime(2025, 6, 14, tzinfo=timezone.utc), clinic, "DECEASED"),
        _row(datetime(2025, 5, 31, 23, 59, tzinfo=timezone.utc), None, "REMISSION"),
        _row(datetime(2024, 6, 10, tzinfo=timezone.utc), None, None),
    ]

    stats = reduce_case_rows(rows, NOW)

    assert stats.totals.total_cases == 4
    # Same month of a different year does not count.
    assert stats.totals.new_this_month == 2
    # 2 of 3 known outcomes: 66.67% -> 67
    assert stats.totals.remission_rate == 67
    assert stats.totals.active_clinics == 3
    assert [(m.month, m.count) for m in stats.cases_by_month] == [
        ("2024-06", 1),
        ("2025-05", 1),
        ("2025-06", 2),
    ]


@pytest.mark.parametrize(
    "outcomes, expected",
    [
        ([], 0),
        ([None, None], 0),
        (["REMISSION"], 100),
        (["REMISSION"] + ["DECEASED"] * 7, 13),  # 12.5 rounds half up
        (["REMISSION"] * 2 + ["DECEASED"] * 5 + [None] * 3, 29),
    ],
)
def test_remission_rate_rounding(outcomes, expected):
    assert remission_rate(outcomes, "REMISSION") == expected


def test_top_tumour_types_fall_back_to_custom_then_unknown_and_truncate():
    day = datetime(2025, 1, 1, tzinfo=timezone.utc)
    lymphoma = Referenced(id=uuid.uuid4(), name="Lymphoma")
    rows = (
        [_row(day, tumour_type=lymphoma) for _ in range(4)]
        + [_row(day, tumour_type=Custom(text="Perianal Adenoma")) for _ in range(3)]
        + [_row(day) for _ in range(2)]
        + [_row(day, tumour_type=Custom(text=name)) for name in ["A", "B", "C"]]
    )

    stats = reduce_case_rows(rows, NOW, top_limit=5)

    assert [(t.name, t.count) for t in stats.top_tumour_types] == [
        ("Lymphoma", 4),
        ("Perianal Adenoma", 3),
        ("Unknown", 2),
        ("A", 1),
        ("B", 1),
    ]


def test_zone_and_species_breakdowns():
    day = datetime(2025, 1, 1, tzinfo=timezone.utc)
    rows = [
        _row(day, geo_zone=SOUTH_WEST, species="Canine"),
        _row(day, geo_zone=SOUTH_WEST, species="Feline"),
        _row(day, geo_zone=NORTH_WEST, species="Canine"),
    ]

    stats = reduce_case_rows(rows, NOW)

    assert [(z.name, z.count) for z in stats.cases_by_zone] == [(SOUTH_WEST, 2), (NORTH_WEST, 1)]
    assert [(s.name, s.count) for s in stats.cases_by_species] == [("Canine", 2), ("Feline", 1)]


@pytest.mark.anyio
async def test_stats_run_over_the_unpaginated_case_set(case_engine, factory, monkeypatch):
    monkeypatch.setattr("oncoshare.core.config.settings.CASE_PAGE_SIZE", 2)
    clinic = factory.clinic()
    for day in range(1, 6):
        factory.case(clinic, diagnosis_date=datetime(2025, 6, day, tzinfo=timezone.utc))

    result = await StatsAggregator(case_engine, clock=lambda: NOW).stats(CaseFilter())

    assert result.warning is None
    assert result.value.totals.total_cases == 5
    assert result.value.totals.new_this_month == 5
    assert result.value.totals.active_clinics == 1


@pytest.mark.anyio
async def test_stats_on_empty_store_are_zero(case_engine):
    result = await StatsAggregator(case_engine, clock=lambda: NOW).stats(CaseFilter())

    assert result.warning is None
    assert result.value.totals.total_cases == 0
    assert result.value.totals.remission_rate == 0


@pytest.mark.anyio
async def test_stats_failure_returns_zeros_with_warning(fallback_engine, monkeypatch):
    async def broken_query(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(fallback_engine, "query", broken_query)

    result = await StatsAggregator(fallback_engine).stats(CaseFilter())

    assert result.warning == STATS_UNAVAILABLE
    assert result.value.totals.total_cases == 0
    assert result.value.cases_by_month == []
