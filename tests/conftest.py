"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

import pytest

from athlete_dashboard.data.fixtures import FixtureDataProvider
from athlete_dashboard.models.domain import InjuryRecord, PerformanceLog
from athlete_dashboard.services.narrative.gateway import StaticNarrativeGateway


@pytest.fixture
def fixture_provider() -> FixtureDataProvider:
    """Fixture data provider with the default data set and no artificial delay."""
    return FixtureDataProvider(latency_seconds=0)


@pytest.fixture
def offline_provider() -> FixtureDataProvider:
    """Provider whose source is unreachable."""
    return FixtureDataProvider(latency_seconds=0, available=False)


@pytest.fixture
def static_gateway() -> StaticNarrativeGateway:
    return StaticNarrativeGateway()


@pytest.fixture
def make_log():
    """Factory for performance logs with a given strain."""

    def _make_log(
        strain: float,
        *,
        index: int = 1,
        metric: str = "100m Sprint",
        duration_min: float = 60,
    ) -> PerformanceLog:
        return PerformanceLog(
            id=f"p{index}",
            date=f"2023-10-{index:02d}",
            metric=metric,
            value=11.0,
            unit="s",
            strain=strain,
            duration_min=duration_min,
        )

    return _make_log


@pytest.fixture
def make_injury():
    """Factory for injury records with a given status."""

    def _make_injury(status: str, *, index: int = 1) -> InjuryRecord:
        return InjuryRecord(
            id=f"i{index}",
            date=f"2023-09-{index:02d}",
            area="Left Ankle",
            severity="Low",
            status=status,
            pain_level=3,
        )

    return _make_injury
