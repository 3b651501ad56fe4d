from loguru import logger

from athlete_dashboard.config.settings import Settings
from athlete_dashboard.data.fixtures import FixtureDataProvider
from athlete_dashboard.data.http_provider import HttpDataProvider
from athlete_dashboard.data.provider import DataProvider


def build_data_provider(settings: Settings) -> DataProvider:
    """Pick the data provider implementation from settings."""
    if settings.data_backend == "http":
        logger.info(f"Using HTTP data backend: {settings.data_backend_url}")
        return HttpDataProvider(
            settings.data_backend_url,
            timeout=settings.data_backend_timeout_seconds,
        )

    logger.info("Using fixture data backend", latency_seconds=settings.fixture_latency_seconds)
    return FixtureDataProvider(latency_seconds=settings.fixture_latency_seconds)
