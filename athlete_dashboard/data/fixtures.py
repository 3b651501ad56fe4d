"""Static fixture data provider.

Serves a fixed athlete data set behind an artificial delay, standing in for
backend endpoints during local development and tests.
"""

import asyncio
from collections.abc import Sequence
from typing import TypeVar

from loguru import logger

from athlete_dashboard.core.errors import DataUnavailable
from athlete_dashboard.models.domain import (
    AthleteProfile,
    CareerGoal,
    DietLog,
    FinancialRecord,
    InjuryRecord,
    PerformanceLog,
    UserRole,
)

T = TypeVar("T")

FIXTURE_ATHLETE = AthleteProfile(
    id="a1",
    name="Rohan Gupta",
    sport="Athletics (Sprints)",
    age=22,
    height_cm=178,
    weight_kg=72,
    role=UserRole.ATHLETE,
    avatar_url="https://picsum.photos/200/200",
)

FIXTURE_PERFORMANCE: tuple[PerformanceLog, ...] = (
    PerformanceLog(id="p1", date="2023-10-20", metric="100m Sprint", value=11.2, unit="s", strain=7, duration_min=60),
    PerformanceLog(id="p2", date="2023-10-22", metric="100m Sprint", value=11.0, unit="s", strain=8, duration_min=90),
    PerformanceLog(id="p3", date="2023-10-24", metric="100m Sprint", value=10.9, unit="s", strain=9, duration_min=60),
    PerformanceLog(id="p4", date="2023-10-26", metric="Squat 1RM", value=140, unit="kg", strain=9, duration_min=45),
    PerformanceLog(id="p5", date="2023-10-28", metric="100m Sprint", value=10.85, unit="s", strain=8, duration_min=75),
)

FIXTURE_INJURIES: tuple[InjuryRecord, ...] = (
    InjuryRecord(id="i1", date="2023-09-10", area="Right Hamstring", severity="Medium", status="Resolved", pain_level=0),
    InjuryRecord(id="i2", date="2023-10-25", area="Left Ankle", severity="Low", status="Active", pain_level=3),
)

FIXTURE_DIET: tuple[DietLog, ...] = (
    DietLog(
        id="d1",
        date="2023-10-28",
        meal="Breakfast",
        calories=600,
        protein=30,
        carbs=80,
        fats=15,
        description="Oatmeal with whey and banana",
    ),
    DietLog(
        id="d2",
        date="2023-10-28",
        meal="Lunch",
        calories=850,
        protein=45,
        carbs=100,
        fats=25,
        description="Chicken curry with rice and dal",
    ),
    DietLog(
        id="d3",
        date="2023-10-28",
        meal="Dinner",
        calories=500,
        protein=35,
        carbs=40,
        fats=15,
        description="Grilled paneer salad",
    ),
)

FIXTURE_FINANCE: tuple[FinancialRecord, ...] = (
    FinancialRecord(
        id="f1", date="2023-10-01", type="Income", category="Sponsorship", amount=25000, description="Local Brand Deal"
    ),
    FinancialRecord(id="f2", date="2023-10-05", type="Expense", category="Equipment", amount=8000, description="New Spikes"),
    FinancialRecord(
        id="f3", date="2023-10-15", type="Expense", category="Travel", amount=5000, description="Transport to State Meet"
    ),
)

FIXTURE_GOALS: tuple[CareerGoal, ...] = (
    CareerGoal(id="c1", title="Qualify for Nationals", target_date="2024-03-01", status="In Progress"),
    CareerGoal(id="c2", title="Sub 10.5s 100m", target_date="2024-06-01", status="Pending"),
)


class FixtureDataProvider:
    """DataProvider over in-memory fixtures.

    Args:
        latency_seconds: Delay applied before every read
        available: When False every read raises DataUnavailable
        profile, performance, injuries, diet, finance, goals: Optional
            replacements for the default fixture collections
    """

    def __init__(
        self,
        *,
        latency_seconds: float = 0.5,
        available: bool = True,
        profile: AthleteProfile | None = None,
        performance: Sequence[PerformanceLog] | None = None,
        injuries: Sequence[InjuryRecord] | None = None,
        diet: Sequence[DietLog] | None = None,
        finance: Sequence[FinancialRecord] | None = None,
        goals: Sequence[CareerGoal] | None = None,
    ) -> None:
        self.latency_seconds = latency_seconds
        self.available = available
        self._profile = profile if profile is not None else FIXTURE_ATHLETE
        self._performance = tuple(performance) if performance is not None else FIXTURE_PERFORMANCE
        self._injuries = tuple(injuries) if injuries is not None else FIXTURE_INJURIES
        self._diet = tuple(diet) if diet is not None else FIXTURE_DIET
        self._finance = tuple(finance) if finance is not None else FIXTURE_FINANCE
        self._goals = tuple(goals) if goals is not None else FIXTURE_GOALS

    async def _serve(self, source: str, records: Sequence[T]) -> list[T]:
        await self._wait(source)
        return list(records)

    async def _wait(self, source: str) -> None:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        if not self.available:
            raise DataUnavailable(source, "fixture source is offline")
        logger.debug("Serving fixtures", source=source)

    async def get_athlete_profile(self) -> AthleteProfile:
        await self._wait("profile")
        return self._profile

    async def get_performance_logs(self) -> list[PerformanceLog]:
        return await self._serve("performance", self._performance)

    async def get_injury_history(self) -> list[InjuryRecord]:
        return await self._serve("injuries", self._injuries)

    async def get_diet_logs(self) -> list[DietLog]:
        return await self._serve("diet", self._diet)

    async def get_financial_records(self) -> list[FinancialRecord]:
        return await self._serve("finance", self._finance)

    async def get_career_goals(self) -> list[CareerGoal]:
        return await self._serve("goals", self._goals)
