"""Prompt text for the narrative requests.

Records are embedded as camelCase JSON, the same shape a drop-in narrative
provider receives.
"""

import json
from collections.abc import Sequence

from athlete_dashboard.models.domain import DietLog, DomainRecord, FinancialRecord, PerformanceLog

DASHBOARD_SYSTEM_PROMPT = """You are a motivational performance coach for semi-professional athletes.
Be specific to the data you are given. Never invent sessions or numbers."""

INJURY_SYSTEM_PROMPT = """You are a sports physiotherapist.
You explain an injury risk score that has already been calculated.
You MUST NOT change or re-estimate the score."""

DIET_SYSTEM_PROMPT = """You are a sports nutritionist reviewing an athlete's daily food log."""

FINANCE_SYSTEM_PROMPT = """You are a financial advisor for semi-pro athletes. Answer in plain text."""

PRACTICE_SYSTEM_PROMPT = """You are an elite sports coach. Answer in plain text."""


def records_json(records: Sequence[DomainRecord]) -> str:
    return json.dumps([record.to_payload() for record in records])


def dashboard_prompt(athlete_name: str, logs: Sequence[PerformanceLog]) -> str:
    return "\n".join(
        [
            f"Analyze the following recent performance data for athlete {athlete_name}.",
            f"Data: {records_json(logs)}",
            "",
            "Provide a 2-sentence motivational summary and one key focus area for the week.",
            'Return JSON: { "motivation": "string", "focusArea": "string" }',
        ]
    )


def injury_prompt(risk_score: float, factors: Sequence[str], logs: Sequence[PerformanceLog]) -> str:
    return "\n".join(
        [
            f"The calculated injury risk score for this athlete is {risk_score:.2f} (0-1 scale).",
            f"Risk Factors Identified: {', '.join(factors)}.",
            f"Recent Training Load: {records_json(logs)}",
            "",
            "Provide a short paragraph explaining why the risk is at this level "
            "and 3 specific actionable recovery tips.",
            'Return JSON: { "explanation": "string", "tips": ["string", "string", "string"] }',
        ]
    )


def diet_prompt(logs: Sequence[DietLog]) -> str:
    return "\n".join(
        [
            "Analyze the following daily food log:",
            records_json(logs),
            "",
            'Classify the diet as "Optimal", "Needs Improvement", or "Poor".',
            "Calculate the approximate macro split (Protein/Carb/Fat).",
            "Provide 3 specific dietary adjustments for an athlete.",
            "",
            "Return JSON: {",
            '  "status": "Optimal" | "Needs Improvement" | "Poor",',
            '  "macroBalance": "string (e.g. 30P/50C/20F)",',
            '  "recommendations": ["string", "string", "string"]',
            "}",
        ]
    )


def finance_prompt(records: Sequence[FinancialRecord]) -> str:
    return "\n".join(
        [
            "Analyze these financial records for a semi-pro athlete:",
            records_json(records),
            "",
            "Provide a brief summary of spending habits and 2 tips for saving money "
            "for better equipment or training camps.",
        ]
    )


PRACTICE_PROMPT = """Analyze this image captured during a practice session.
Identify the exercise or movement being performed.
Critique the form/posture if visible.
Give 2 quick tips to improve technique."""
