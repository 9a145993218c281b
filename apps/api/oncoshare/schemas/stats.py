"""Dashboard/analytics statistics schemas."""

from pydantic import BaseModel


class StatsTotals(BaseModel):
    total_cases: int = 0
    new_this_month: int = 0
    remission_rate: int = 0
    active_clinics: int = 0


class MonthCount(BaseModel):
    month: str  # YYYY-MM
    count: int


class NameCount(BaseModel):
    name: str
    count: int


class CaseStats(BaseModel):
    totals: StatsTotals = StatsTotals()
    cases_by_month: list[MonthCount] = []
    top_tumour_types: list[NameCount] = []
    cases_by_zone: list[NameCount] = []
    cases_by_species: list[NameCount] = []

    @classmethod
    def empty(cls) -> "CaseStats":
        return cls()


class StatsOut(CaseStats):
    warning: str | None = None
