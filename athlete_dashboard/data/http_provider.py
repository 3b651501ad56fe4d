"""HTTP data provider.

Reads dashboard records from a JSON backend. Any failure (transport error,
non-2xx status, non-JSON body, record that fails validation) is reported as
DataUnavailable; a partially valid collection is never returned.
"""

from typing import Any, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, TypeAdapter, ValidationError

from athlete_dashboard.core.errors import DataUnavailable
from athlete_dashboard.models.domain import (
    AthleteProfile,
    CareerGoal,
    DietLog,
    FinancialRecord,
    InjuryRecord,
    PerformanceLog,
)

M = TypeVar("M", bound=BaseModel)

ENDPOINTS: dict[str, str] = {
    "profile": "/athlete/profile",
    "performance": "/performance",
    "injuries": "/injuries",
    "diet": "/diet",
    "finance": "/finance",
    "goals": "/goals",
}

DEFAULT_TIMEOUT = 10.0


class HttpDataProvider:
    """DataProvider backed by a REST/JSON API.

    Args:
        base_url: Backend root, e.g. "https://api.example.com/v1"
        timeout: Per-request timeout in seconds
        client: Optional preconfigured client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def _fetch_json(self, source: str) -> Any:
        url = f"{self.base_url}{ENDPOINTS[source]}"
        logger.debug("Fetching records", source=source, url=url)
        try:
            response = await self._get_client().get(url)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Backend returned {status_code} for {source}",
                source=source,
                url=url,
                status_code=e.response.status_code,
            )
            raise DataUnavailable(source, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning(
                "Backend unreachable for {source}: {error_type}",
                source=source,
                url=url,
                error_type=type(e).__name__,
            )
            raise DataUnavailable(source, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            logger.warning("Backend returned non-JSON body for {source}", source=source, url=url)
            raise DataUnavailable(source, "response body is not JSON") from e

    async def _fetch_list(self, source: str, model: type[M]) -> list[M]:
        payload = await self._fetch_json(source)
        try:
            records = TypeAdapter(list[model]).validate_python(payload)
        except ValidationError as e:
            logger.warning(
                "Backend returned invalid {source} records",
                source=source,
                error_count=e.error_count(),
            )
            raise DataUnavailable(source, f"invalid records ({e.error_count()} errors)") from e
        logger.debug("Fetched records", source=source, count=len(records))
        return records

    async def get_athlete_profile(self) -> AthleteProfile:
        payload = await self._fetch_json("profile")
        try:
            return AthleteProfile.model_validate(payload)
        except ValidationError as e:
            logger.warning("Backend returned an invalid athlete profile", error_count=e.error_count())
            raise DataUnavailable("profile", f"invalid profile ({e.error_count()} errors)") from e

    async def get_performance_logs(self) -> list[PerformanceLog]:
        return await self._fetch_list("performance", PerformanceLog)

    async def get_injury_history(self) -> list[InjuryRecord]:
        return await self._fetch_list("injuries", InjuryRecord)

    async def get_diet_logs(self) -> list[DietLog]:
        return await self._fetch_list("diet", DietLog)

    async def get_financial_records(self) -> list[FinancialRecord]:
        return await self._fetch_list("finance", FinancialRecord)

    async def get_career_goals(self) -> list[CareerGoal]:
        return await self._fetch_list("goals", CareerGoal)
