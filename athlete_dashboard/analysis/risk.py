"""Injury risk scoring.

Heuristic baseline score computed locally from recent training strain and
injury status. The narrative gateway only explains the score; it never
changes it.
"""

from collections.abc import Sequence

from loguru import logger

from athlete_dashboard.core.errors import InsufficientData
from athlete_dashboard.models.domain import InjuryRecord, PerformanceLog
from athlete_dashboard.models.insights import RiskLevel, RiskPrediction

RECENT_WINDOW = 5

BASE_RISK = 0.2
HIGH_STRAIN_RISK = 0.4
LOW_STRAIN_RISK = 0.1
ACTIVE_INJURY_RISK = 0.25
MAX_RISK = 0.99

# Both thresholds are strict (>). They differ on purpose.
RISK_FACTOR_STRAIN_THRESHOLD = 8.0
HIGH_STRAIN_FACTOR_THRESHOLD = 7.5

HIGH_RISK_THRESHOLD = 0.7
MODERATE_RISK_THRESHOLD = 0.4

FACTOR_HIGH_STRAIN = "High Recent Strain"
FACTOR_MODERATE_STRAIN = "Moderate Strain"
FACTOR_ACTIVE_RECOVERY = "Active Recovery in Progress"
FACTOR_NO_ACTIVE_INJURIES = "No Active Injuries"
FACTOR_MONOTONY = "Training Load Monotony Detected"


def predict_injury_risk(
    logs: Sequence[PerformanceLog],
    injuries: Sequence[InjuryRecord],
) -> RiskPrediction:
    """Compute the baseline injury risk score and its contributing factors.

    Args:
        logs: Performance logs in chronological order (oldest first)
        injuries: Injury history, any order

    Returns:
        RiskPrediction with:
        - score: 0.2 + strain component + 0.25 per active injury, capped at 0.99
        - factors: strain factor, injury factor, monotony factor (fixed order)

    Raises:
        InsufficientData: If logs is empty
    """
    if not logs:
        raise InsufficientData("Cannot score injury risk without performance logs")

    recent = list(logs)[-RECENT_WINDOW:]
    avg_strain = sum(log.strain for log in recent) / len(recent)

    # Monotony is always flagged; load is only reported for diagnostics.
    avg_load = sum(log.load for log in recent) / len(recent)

    risk_factor = HIGH_STRAIN_RISK if avg_strain > RISK_FACTOR_STRAIN_THRESHOLD else LOW_STRAIN_RISK

    active_injuries = sum(1 for injury in injuries if injury.is_active)

    total_risk = BASE_RISK + risk_factor + active_injuries * ACTIVE_INJURY_RISK
    total_risk = min(total_risk, MAX_RISK)

    factors = (
        FACTOR_HIGH_STRAIN if avg_strain > HIGH_STRAIN_FACTOR_THRESHOLD else FACTOR_MODERATE_STRAIN,
        FACTOR_ACTIVE_RECOVERY if active_injuries > 0 else FACTOR_NO_ACTIVE_INJURIES,
        FACTOR_MONOTONY,
    )

    logger.debug(
        "Injury risk computed",
        window=len(recent),
        avg_strain=avg_strain,
        avg_load=avg_load,
        active_injuries=active_injuries,
        score=total_risk,
    )

    return RiskPrediction(
        score=total_risk,
        factors=factors,
        avg_strain=avg_strain,
        active_injuries=active_injuries,
    )


def risk_level_for_score(score: float) -> RiskLevel:
    """Map a risk score to its band.

    0.7 and 0.4 are exclusive lower bounds: 0.7 is Moderate, 0.4 is Low.
    """
    if score > HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score > MODERATE_RISK_THRESHOLD:
        return RiskLevel.MODERATE
    return RiskLevel.LOW
