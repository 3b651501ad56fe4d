"""Narrative generation gateway.

Fail safely.
Never change a computed number.
Never let an LLM failure reach the caller.

Every request has a literal fallback. Network errors, timeouts, malformed or
partially matching JSON and empty text all degrade to that fallback; a
partially parsed response is never returned.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import Sequence
from typing import Any, Protocol, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError
from pydantic_ai import Agent, BinaryContent

from athlete_dashboard.analysis.insights import recent_logs
from athlete_dashboard.config.settings import Settings
from athlete_dashboard.core.errors import NarrativeUnavailable
from athlete_dashboard.models.domain import DietLog, FinancialRecord, PerformanceLog
from athlete_dashboard.models.insights import DashboardInsight, DietAnalysis, DietStatus, InjuryExplanation
from athlete_dashboard.services.llm.model import get_model
from athlete_dashboard.services.narrative import prompts

O = TypeVar("O", bound=BaseModel)

# Number of most recent performance logs sent with dashboard and injury requests
NARRATIVE_LOG_WINDOW = 3

DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"

FALLBACK_DASHBOARD_INSIGHT = DashboardInsight(
    motivation="Keep pushing your limits!",
    focus_area="Consistency",
)
FALLBACK_INJURY_EXPLANATION = InjuryExplanation(
    explanation="Unable to generate detailed analysis.",
    tips=("Rest well", "Hydrate", "Stretch"),
)
FALLBACK_DIET_ANALYSIS = DietAnalysis(
    status=DietStatus.NEEDS_IMPROVEMENT,
    macro_balance="Unknown",
    recommendations=("Eat more protein",),
)
FALLBACK_FINANCE_ADVICE = "Track your expenses closely to save for upcoming tournaments."
FALLBACK_PRACTICE_CRITIQUE = "Could not analyze the image. Please try again with better lighting."


# -------------------------------------------------------------------
# Gateway Interface (Contract)
# -------------------------------------------------------------------


class NarrativeGateway(Protocol):
    """Narrative layer interface.

    Implementations never raise; failures return the request's fallback.
    """

    async def dashboard_insight(self, athlete_name: str, logs: Sequence[PerformanceLog]) -> DashboardInsight: ...

    async def explain_injury_risk(
        self,
        risk_score: float,
        factors: Sequence[str],
        logs: Sequence[PerformanceLog],
    ) -> InjuryExplanation: ...

    async def analyze_diet(self, logs: Sequence[DietLog]) -> DietAnalysis: ...

    async def finance_advice(self, records: Sequence[FinancialRecord]) -> str: ...

    async def critique_practice_frame(self, image_base64: str) -> str: ...


# -------------------------------------------------------------------
# Static Gateway (Deterministic)
# -------------------------------------------------------------------


class StaticNarrativeGateway:
    """Offline gateway that always serves the fallbacks."""

    async def dashboard_insight(self, athlete_name: str, logs: Sequence[PerformanceLog]) -> DashboardInsight:
        _ = (athlete_name, logs)
        return FALLBACK_DASHBOARD_INSIGHT.model_copy(deep=True)

    async def explain_injury_risk(
        self,
        risk_score: float,
        factors: Sequence[str],
        logs: Sequence[PerformanceLog],
    ) -> InjuryExplanation:
        _ = (risk_score, factors, logs)
        return FALLBACK_INJURY_EXPLANATION.model_copy(deep=True)

    async def analyze_diet(self, logs: Sequence[DietLog]) -> DietAnalysis:
        _ = logs
        return FALLBACK_DIET_ANALYSIS.model_copy(deep=True)

    async def finance_advice(self, records: Sequence[FinancialRecord]) -> str:
        _ = records
        return FALLBACK_FINANCE_ADVICE

    async def critique_practice_frame(self, image_base64: str) -> str:
        _ = image_base64
        return FALLBACK_PRACTICE_CRITIQUE


# -------------------------------------------------------------------
# LLM Gateway
# -------------------------------------------------------------------


def _coerce_output(request: str, output: Any, output_type: type[O]) -> O:
    """Validate an agent output against the request schema.

    Raises:
        NarrativeUnavailable: If the output is not a complete, valid instance
    """
    if isinstance(output, output_type):
        return output
    try:
        if isinstance(output, str | bytes):
            return output_type.model_validate_json(output)
        if isinstance(output, dict):
            return output_type.model_validate(output)
    except ValidationError as e:
        raise NarrativeUnavailable(request, f"malformed output ({e.error_count()} errors)") from e
    raise NarrativeUnavailable(request, f"unexpected output type {type(output).__name__}")


def _coerce_text(request: str, output: Any) -> str:
    if not isinstance(output, str) or not output.strip():
        raise NarrativeUnavailable(request, "empty or non-text output")
    return output.strip()


def decode_image_payload(image_base64: str) -> BinaryContent:
    """Decode a base64 image, with or without a data URL prefix.

    Raises:
        NarrativeUnavailable: If the payload is not valid base64
    """
    media_type = DEFAULT_IMAGE_MEDIA_TYPE
    data = image_base64.strip()
    if "," in data:
        header, data = data.split(",", 1)
        if header.startswith("data:") and ";" in header:
            media_type = header[len("data:") : header.index(";")] or DEFAULT_IMAGE_MEDIA_TYPE
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise NarrativeUnavailable("practice_frame", "image payload is not valid base64") from e
    if not raw:
        raise NarrativeUnavailable("practice_frame", "image payload is empty")
    return BinaryContent(data=raw, media_type=media_type)


class LLMNarrativeGateway:
    """Gateway backed by a pydantic-ai Agent per request.

    Args:
        provider: LLM provider passed to get_model() ("google" or "openai")
        model_name: Provider model name
        api_key: Provider API key, passed to get_model()
        timeout_seconds: Upper bound for one request, fallback on expiry
        model: Optional prebuilt pydantic-ai model, used instead of get_model()
    """

    def __init__(
        self,
        *,
        provider: str = "google",
        model_name: str = "gemini-2.5-flash",
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        model: Any = None,
    ) -> None:
        self.provider = provider
        self.model_name = model_name
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._model = model

    def _resolve_model(self):
        if self._model is not None:
            return self._model
        return get_model(self.provider, self.model_name, api_key=self.api_key)

    async def _run(self, request: str, system_prompt: str, user_prompt: Any, output_type: Any) -> Any:
        agent = Agent(
            model=self._resolve_model(),
            system_prompt=system_prompt,
            output_type=output_type,
        )
        logger.debug(
            "LLM Prompt: {request}",
            request=request,
            system_prompt=system_prompt,
            user_prompt=user_prompt if isinstance(user_prompt, str) else "<multimodal>",
        )
        try:
            result = await asyncio.wait_for(agent.run(user_prompt), timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise NarrativeUnavailable(request, f"timed out after {self.timeout_seconds}s") from e
        return result.output

    async def _structured(
        self,
        request: str,
        system_prompt: str,
        user_prompt: str,
        output_type: type[O],
        fallback: O,
    ) -> O:
        try:
            output = await self._run(request, system_prompt, user_prompt, output_type)
            parsed = _coerce_output(request, output, output_type)
        except Exception as e:
            logger.warning(
                "Narrative request failed, using fallback (request={request}, error_type={error_type}): {error}",
                request=request,
                error_type=type(e).__name__,
                error=str(e),
            )
            return fallback.model_copy(deep=True)
        else:
            logger.info("Narrative generated", request=request)
            return parsed

    async def _text(self, request: str, system_prompt: str, user_prompt: Any, fallback: str) -> str:
        try:
            output = await self._run(request, system_prompt, user_prompt, str)
            text = _coerce_text(request, output)
        except Exception as e:
            logger.warning(
                "Narrative request failed, using fallback (request={request}, error_type={error_type}): {error}",
                request=request,
                error_type=type(e).__name__,
                error=str(e),
            )
            return fallback
        else:
            logger.info("Narrative generated", request=request, text_length=len(text))
            return text

    async def dashboard_insight(self, athlete_name: str, logs: Sequence[PerformanceLog]) -> DashboardInsight:
        return await self._structured(
            "dashboard_insight",
            prompts.DASHBOARD_SYSTEM_PROMPT,
            prompts.dashboard_prompt(athlete_name, recent_logs(logs, NARRATIVE_LOG_WINDOW)),
            DashboardInsight,
            FALLBACK_DASHBOARD_INSIGHT,
        )

    async def explain_injury_risk(
        self,
        risk_score: float,
        factors: Sequence[str],
        logs: Sequence[PerformanceLog],
    ) -> InjuryExplanation:
        return await self._structured(
            "injury_explanation",
            prompts.INJURY_SYSTEM_PROMPT,
            prompts.injury_prompt(risk_score, factors, recent_logs(logs, NARRATIVE_LOG_WINDOW)),
            InjuryExplanation,
            FALLBACK_INJURY_EXPLANATION,
        )

    async def analyze_diet(self, logs: Sequence[DietLog]) -> DietAnalysis:
        return await self._structured(
            "diet_analysis",
            prompts.DIET_SYSTEM_PROMPT,
            prompts.diet_prompt(logs),
            DietAnalysis,
            FALLBACK_DIET_ANALYSIS,
        )

    async def finance_advice(self, records: Sequence[FinancialRecord]) -> str:
        return await self._text(
            "finance_advice",
            prompts.FINANCE_SYSTEM_PROMPT,
            prompts.finance_prompt(records),
            FALLBACK_FINANCE_ADVICE,
        )

    async def critique_practice_frame(self, image_base64: str) -> str:
        try:
            image = decode_image_payload(image_base64)
        except NarrativeUnavailable as e:
            logger.warning(
                "Practice frame rejected, using fallback: {error}",
                request="practice_frame",
                error=e.reason,
            )
            return FALLBACK_PRACTICE_CRITIQUE
        return await self._text(
            "practice_frame",
            prompts.PRACTICE_SYSTEM_PROMPT,
            [prompts.PRACTICE_PROMPT, image],
            FALLBACK_PRACTICE_CRITIQUE,
        )


def _api_key_for(settings: Settings) -> str | None:
    if settings.narrative_provider == "openai":
        return settings.openai_api_key or None
    return settings.gemini_api_key or None


def build_narrative_gateway(settings: Settings) -> NarrativeGateway:
    """Pick the gateway implementation from settings."""
    if not settings.narrative_enabled:
        logger.info("Narrative generation disabled, serving static fallbacks")
        return StaticNarrativeGateway()
    return LLMNarrativeGateway(
        provider=settings.narrative_provider,
        model_name=settings.narrative_model,
        api_key=_api_key_for(settings),
        timeout_seconds=settings.narrative_timeout_seconds,
    )
