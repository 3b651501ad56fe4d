"""Derived records computed from the domain records.

None of these are persisted; each is recomputed per request. The narrative
output schemas (DashboardInsight, InjuryExplanation, DietAnalysis) double as
the structured output types requested from the narrative model.
"""

import datetime as dt
from enum import StrEnum

from pydantic import Field

from athlete_dashboard.models.domain import DomainRecord


class RiskLevel(StrEnum):
    """Injury risk band.

    CRITICAL is part of the presentation vocabulary but is never produced by
    risk_level_for_score().
    """

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"


class DietStatus(StrEnum):
    OPTIMAL = "Optimal"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    POOR = "Poor"


class RiskPrediction(DomainRecord):
    """Raw output of the injury risk heuristic."""

    score: float = Field(ge=0, le=1)
    factors: tuple[str, ...]
    avg_strain: float
    active_injuries: int = Field(ge=0)


class InjuryRiskAssessment(DomainRecord):
    risk_score: float = Field(ge=0, le=1)
    risk_level: RiskLevel
    factors: tuple[str, ...]
    explanation: str
    tips: tuple[str, ...] = ()


# ============================================================================
# Narrative output schemas
# ============================================================================


class DashboardInsight(DomainRecord):
    motivation: str = Field(description="Two-sentence motivational summary")
    focus_area: str = Field(description="One key focus area for the week")


class InjuryExplanation(DomainRecord):
    explanation: str = Field(description="Short paragraph explaining the risk level")
    tips: tuple[str, ...] = Field(description="Actionable recovery tips")


class DietAnalysis(DomainRecord):
    status: DietStatus
    macro_balance: str = Field(description="Approximate macro split, e.g. 30P/50C/20F")
    recommendations: tuple[str, ...]


# ============================================================================
# Aggregates
# ============================================================================


class MacroTotals(DomainRecord):
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    calories: float = 0.0


class MacroSlice(DomainRecord):
    name: str
    value: float


class FinancialTotals(DomainRecord):
    """Income and expense sums. The two are never netted."""

    income: float = 0.0
    expense: float = 0.0


class StrainPoint(DomainRecord):
    date: dt.date
    strain: float

