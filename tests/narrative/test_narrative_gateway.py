"""Tests for the narrative gateway.

These tests verify the request/fallback contract, not the LLM itself.
We mock the pydantic-ai Agent to control what the model returns.
"""

import asyncio
import base64
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from loguru import logger
from pydantic_ai import Agent, BinaryContent

from athlete_dashboard.config.settings import Settings
from athlete_dashboard.data.fixtures import FIXTURE_DIET, FIXTURE_FINANCE, FIXTURE_PERFORMANCE
from athlete_dashboard.models.insights import DashboardInsight, DietAnalysis, DietStatus, InjuryExplanation
from athlete_dashboard.services.llm.model import get_model
from athlete_dashboard.services.narrative.gateway import (
    FALLBACK_DASHBOARD_INSIGHT,
    FALLBACK_DIET_ANALYSIS,
    FALLBACK_FINANCE_ADVICE,
    FALLBACK_INJURY_EXPLANATION,
    FALLBACK_PRACTICE_CRITIQUE,
    LLMNarrativeGateway,
    StaticNarrativeGateway,
    build_narrative_gateway,
)

AGENT_PATH = "athlete_dashboard.services.narrative.gateway.Agent"


def _gateway(**kwargs) -> LLMNarrativeGateway:
    # A sentinel model keeps get_model() (and API keys) out of the picture.
    return LLMNarrativeGateway(model=object(), **kwargs)


def _mock_agent(mock_agent_class, *, output=None, side_effect=None) -> AsyncMock:
    mock_agent = AsyncMock(spec=Agent)
    if side_effect is not None:
        mock_agent.run = AsyncMock(side_effect=side_effect)
    else:
        mock_agent.run = AsyncMock(return_value=MagicMock(output=output))
    mock_agent_class.return_value = mock_agent
    return mock_agent


@pytest.mark.asyncio
async def test_dashboard_insight_uses_last_three_logs():
    expected = DashboardInsight(motivation="Great block of sprints.", focus_area="Start mechanics")

    with patch(AGENT_PATH) as mock_agent_class:
        mock_agent = _mock_agent(mock_agent_class, output=expected)

        insight = await _gateway().dashboard_insight("Rohan Gupta", FIXTURE_PERFORMANCE)

        assert insight == expected
        prompt = mock_agent.run.call_args.args[0]
        assert "Rohan Gupta" in prompt
        assert '"id": "p3"' in prompt
        assert '"id": "p5"' in prompt
        assert '"id": "p2"' not in prompt
        assert mock_agent_class.call_args.kwargs["output_type"] is DashboardInsight


@pytest.mark.asyncio
async def test_dashboard_insight_falls_back_on_error():
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, side_effect=RuntimeError("503 from provider"))

        insight = await _gateway().dashboard_insight("Rohan Gupta", FIXTURE_PERFORMANCE)

    assert insight == FALLBACK_DASHBOARD_INSIGHT
    assert insight.motivation == "Keep pushing your limits!"
    assert insight.focus_area == "Consistency"


@pytest.mark.asyncio
async def test_injury_explanation_prompt_carries_score_and_factors():
    expected = InjuryExplanation(explanation="Load is high.", tips=["Sleep 9h", "Ice the ankle", "Deload"])

    with patch(AGENT_PATH) as mock_agent_class:
        mock_agent = _mock_agent(mock_agent_class, output=expected)

        explanation = await _gateway().explain_injury_risk(
            0.85,
            ["High Recent Strain", "Active Recovery in Progress"],
            FIXTURE_PERFORMANCE,
        )

        prompt = mock_agent.run.call_args.args[0]

    assert explanation == expected
    assert "0.85" in prompt
    assert "High Recent Strain, Active Recovery in Progress" in prompt
    assert '"id": "p1"' not in prompt


@pytest.mark.asyncio
async def test_injury_explanation_fallback_tips():
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, side_effect=ConnectionError("offline"))

        explanation = await _gateway().explain_injury_risk(0.3, [], FIXTURE_PERFORMANCE)

    assert explanation == FALLBACK_INJURY_EXPLANATION
    assert explanation.tips == ("Rest well", "Hydrate", "Stretch")


@pytest.mark.asyncio
async def test_diet_analysis_parses_json_text():
    raw = json.dumps(
        {
            "status": "Optimal",
            "macroBalance": "23P/45C/32F",
            "recommendations": ["Add leafy greens", "Hydrate", "Post-session carbs"],
        }
    )

    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, output=raw)

        analysis = await _gateway().analyze_diet(FIXTURE_DIET)

    assert analysis.status == DietStatus.OPTIMAL
    assert analysis.macro_balance == "23P/45C/32F"
    assert len(analysis.recommendations) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "malformed",
    [
        "Sure! Here is your analysis: the diet looks fine.",
        '{"status": "Optimal", "macroBalance": "30P/50C/20F"',
        '{"status": "Optimal"}',
        '{"status": "Excellent", "macroBalance": "x", "recommendations": []}',
        {"macroBalance": "30P/50C/20F", "recommendations": ["more fish"]},
        42,
    ],
)
async def test_malformed_diet_output_yields_exact_fallback(malformed):
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, output=malformed)

        analysis = await _gateway().analyze_diet(FIXTURE_DIET)

    assert analysis == FALLBACK_DIET_ANALYSIS
    assert analysis.to_payload() == {
        "status": "Needs Improvement",
        "macroBalance": "Unknown",
        "recommendations": ["Eat more protein"],
    }


@pytest.mark.asyncio
async def test_fallback_records_are_immutable():
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, output="garbage")
        gateway = _gateway()

        first = await gateway.analyze_diet(FIXTURE_DIET)
        with pytest.raises(AttributeError):
            first.recommendations.append("mutated")
        second = await gateway.analyze_diet(FIXTURE_DIET)

    assert second.recommendations == ("Eat more protein",)


PROVIDER_ERROR_MESSAGES = [
    "status_code: 429, body: {'error': {'message': 'quota exceeded'}}",
    'upstream returned {"error": "overloaded"}',
    "unexpected {} in template",
    "unbalanced { brace",
    json.dumps({"error": {"code": 500, "status": "INTERNAL"}}),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("message", PROVIDER_ERROR_MESSAGES)
async def test_structured_request_falls_back_on_error_body(message):
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, side_effect=RuntimeError(message))

        insight = await _gateway().dashboard_insight("Rohan Gupta", FIXTURE_PERFORMANCE)

    assert insight == FALLBACK_DASHBOARD_INSIGHT


@pytest.mark.asyncio
@pytest.mark.parametrize("message", PROVIDER_ERROR_MESSAGES)
async def test_text_request_falls_back_on_error_body(message):
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, side_effect=RuntimeError(message))

        advice = await _gateway().finance_advice(FIXTURE_FINANCE)

    assert advice == FALLBACK_FINANCE_ADVICE


@pytest.mark.asyncio
async def test_fallback_warning_keeps_error_text():
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        with patch(AGENT_PATH) as mock_agent_class:
            _mock_agent(mock_agent_class, side_effect=RuntimeError('body: {"error": "overloaded"}'))

            await _gateway().analyze_diet(FIXTURE_DIET)
    finally:
        logger.remove(sink_id)

    assert len(messages) == 1
    assert "request=diet_analysis" in messages[0]
    assert "error_type=RuntimeError" in messages[0]
    assert 'body: {"error": "overloaded"}' in messages[0]



@pytest.mark.asyncio
async def test_finance_advice_returns_stripped_text():
    with patch(AGENT_PATH) as mock_agent_class:
        mock_agent = _mock_agent(mock_agent_class, output="  Spending is dominated by equipment.  ")

        advice = await _gateway().finance_advice(FIXTURE_FINANCE)

        prompt = mock_agent.run.call_args.args[0]

    assert advice == "Spending is dominated by equipment."
    assert "Sponsorship" in prompt
    assert '"type": "Expense"' in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("output", ["", "   ", None])
async def test_finance_advice_empty_output_falls_back(output):
    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, output=output)

        advice = await _gateway().finance_advice(FIXTURE_FINANCE)

    assert advice == FALLBACK_FINANCE_ADVICE


@pytest.mark.asyncio
async def test_slow_model_times_out_to_fallback():
    async def slow_run(*_args, **_kwargs):
        await asyncio.sleep(1)
        return MagicMock(output="too late")

    with patch(AGENT_PATH) as mock_agent_class:
        _mock_agent(mock_agent_class, side_effect=slow_run)

        advice = await _gateway(timeout_seconds=0.01).finance_advice(FIXTURE_FINANCE)

    assert advice == FALLBACK_FINANCE_ADVICE


@pytest.mark.asyncio
async def test_model_construction_failure_falls_back():
    gateway = LLMNarrativeGateway(provider="openai", model_name="gpt-4o-mini")

    with patch(
        "athlete_dashboard.services.narrative.gateway.get_model",
        side_effect=ValueError("missing API key"),
    ):
        insight = await gateway.dashboard_insight("Rohan Gupta", FIXTURE_PERFORMANCE)

    assert insight == FALLBACK_DASHBOARD_INSIGHT


@pytest.mark.asyncio
async def test_practice_frame_sends_decoded_image():
    image_bytes = b"\x89PNG\r\n\x1a\nfake-frame"
    payload = "data:image/png;base64," + base64.b64encode(image_bytes).decode("ascii")

    with patch(AGENT_PATH) as mock_agent_class:
        mock_agent = _mock_agent(mock_agent_class, output="Squat depth looks good. Keep your chest up.")

        critique = await _gateway().critique_practice_frame(payload)

        user_prompt = mock_agent.run.call_args.args[0]

    assert critique == "Squat depth looks good. Keep your chest up."
    image = next(part for part in user_prompt if isinstance(part, BinaryContent))
    assert image.data == image_bytes
    assert image.media_type == "image/png"


@pytest.mark.asyncio
async def test_practice_frame_plain_base64_defaults_to_jpeg():
    payload = base64.b64encode(b"\xff\xd8\xff\xe0jpeg-frame").decode("ascii")

    with patch(AGENT_PATH) as mock_agent_class:
        mock_agent = _mock_agent(mock_agent_class, output="Good arm drive.")

        await _gateway().critique_practice_frame(payload)

        user_prompt = mock_agent.run.call_args.args[0]

    image = next(part for part in user_prompt if isinstance(part, BinaryContent))
    assert image.media_type == "image/jpeg"


@pytest.mark.asyncio
async def test_practice_frame_invalid_payload_skips_model():
    with patch(AGENT_PATH) as mock_agent_class:
        critique = await _gateway().critique_practice_frame("not base64 at all!!")

    assert critique == FALLBACK_PRACTICE_CRITIQUE
    mock_agent_class.assert_not_called()


@pytest.mark.asyncio
async def test_static_gateway_serves_fallbacks(static_gateway):
    assert await static_gateway.dashboard_insight("Rohan Gupta", []) == FALLBACK_DASHBOARD_INSIGHT
    assert await static_gateway.explain_injury_risk(0.5, [], []) == FALLBACK_INJURY_EXPLANATION
    assert await static_gateway.analyze_diet([]) == FALLBACK_DIET_ANALYSIS
    assert await static_gateway.finance_advice([]) == FALLBACK_FINANCE_ADVICE
    assert await static_gateway.critique_practice_frame("") == FALLBACK_PRACTICE_CRITIQUE


def test_build_narrative_gateway_from_settings():
    assert isinstance(build_narrative_gateway(Settings(NARRATIVE_ENABLED=False)), StaticNarrativeGateway)

    gateway = build_narrative_gateway(
        Settings(NARRATIVE_PROVIDER="openai", NARRATIVE_MODEL="gpt-4o-mini", NARRATIVE_TIMEOUT_SECONDS=5)
    )
    assert isinstance(gateway, LLMNarrativeGateway)
    assert gateway.provider == "openai"
    assert gateway.model_name == "gpt-4o-mini"
    assert gateway.timeout_seconds == 5


def test_diet_analysis_schema_uses_wire_names():
    schema = DietAnalysis.model_json_schema(by_alias=True)

    assert "macroBalance" in schema["properties"]
    assert set(schema["required"]) == {"status", "macroBalance", "recommendations"}


@pytest.mark.parametrize(
    ("overrides", "expected_key"),
    [
        ({"NARRATIVE_PROVIDER": "google", "GEMINI_API_KEY": "gemini-key", "OPENAI_API_KEY": "openai-key"}, "gemini-key"),
        ({"NARRATIVE_PROVIDER": "openai", "GEMINI_API_KEY": "gemini-key", "OPENAI_API_KEY": "openai-key"}, "openai-key"),
        ({"NARRATIVE_PROVIDER": "openai", "OPENAI_API_KEY": ""}, None),
    ],
)
def test_build_narrative_gateway_uses_injected_api_key(overrides, expected_key):
    gateway = build_narrative_gateway(Settings(_env_file=None, **overrides))

    assert gateway.api_key == expected_key


@pytest.mark.asyncio
async def test_gateway_passes_api_key_to_get_model():
    gateway = LLMNarrativeGateway(provider="openai", model_name="gpt-4o-mini", api_key="sk-test")

    with (
        patch("athlete_dashboard.services.narrative.gateway.get_model") as mock_get_model,
        patch(AGENT_PATH) as mock_agent_class,
    ):
        _mock_agent(mock_agent_class, output="Save 20% of sponsorship income.")

        advice = await gateway.finance_advice(FIXTURE_FINANCE)

    assert advice == "Save 20% of sponsorship income."
    mock_get_model.assert_called_once_with("openai", "gpt-4o-mini", api_key="sk-test")


def test_get_model_builds_provider_with_api_key():
    with (
        patch("athlete_dashboard.services.llm.model.OpenAIProvider") as mock_provider,
        patch("athlete_dashboard.services.llm.model.OpenAIChatModel") as mock_model,
    ):
        get_model("openai", "gpt-4o-mini", api_key="sk-test")

    mock_provider.assert_called_once_with(api_key="sk-test")
    mock_model.assert_called_once_with("gpt-4o-mini", provider=mock_provider.return_value)


def test_get_model_rejects_unknown_provider():
    with pytest.raises(ValueError, match="Unsupported LLM provider"):
        get_model("cohere", "command-r")
