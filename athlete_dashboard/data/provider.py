from __future__ import annotations

from typing import Protocol

from athlete_dashboard.models.domain import (
    AthleteProfile,
    CareerGoal,
    DietLog,
    FinancialRecord,
    InjuryRecord,
    PerformanceLog,
)

# -------------------------------------------------------------------
# Data Provider Interface (Contract)
# -------------------------------------------------------------------


class DataProvider(Protocol):
    """Read-only source of dashboard records.

    Implementations may serve static fixtures or a real backend. Every
    method returns a fresh collection and raises DataUnavailable when the
    source cannot be reached. An empty list means "no records", never
    "could not load".
    """

    async def get_athlete_profile(self) -> AthleteProfile: ...

    async def get_performance_logs(self) -> list[PerformanceLog]: ...

    async def get_injury_history(self) -> list[InjuryRecord]: ...

    async def get_diet_logs(self) -> list[DietLog]: ...

    async def get_financial_records(self) -> list[FinancialRecord]: ...

    async def get_career_goals(self) -> list[CareerGoal]: ...
