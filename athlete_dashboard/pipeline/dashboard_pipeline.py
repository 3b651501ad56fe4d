"""Dashboard view pipeline.

Fetch → Join → Derive → Narrate, one coroutine per screen.

Independent fetches for a view run concurrently and are joined before any
derived value is computed. DataUnavailable and InsufficientData propagate;
narrative failures never do.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from athlete_dashboard.analysis.insights import (
    financial_totals,
    last_session,
    macro_distribution,
    macro_totals,
    sprint_series,
    strain_series,
)
from athlete_dashboard.analysis.risk import predict_injury_risk, risk_level_for_score
from athlete_dashboard.data.provider import DataProvider
from athlete_dashboard.models.domain import (
    AthleteProfile,
    CareerGoal,
    DietLog,
    DomainRecord,
    FinancialRecord,
    InjuryRecord,
    PerformanceLog,
)
from athlete_dashboard.models.insights import (
    DashboardInsight,
    DietAnalysis,
    FinancialTotals,
    InjuryRiskAssessment,
    MacroSlice,
    MacroTotals,
    StrainPoint,
)
from athlete_dashboard.services.narrative.gateway import NarrativeGateway, StaticNarrativeGateway

# -------------------------------------------------------------------
# View Models
# -------------------------------------------------------------------


class DashboardView(DomainRecord):
    profile: AthleteProfile
    last_session: PerformanceLog | None
    insight: DashboardInsight


class PerformanceView(DomainRecord):
    logs: list[PerformanceLog]
    sprint_series: list[PerformanceLog]
    strain_series: list[StrainPoint]


class InjuryRehabView(DomainRecord):
    assessment: InjuryRiskAssessment
    injuries: list[InjuryRecord]


class DietView(DomainRecord):
    logs: list[DietLog]
    totals: MacroTotals
    distribution: list[MacroSlice]
    analysis: DietAnalysis


class FinanceCareerView(DomainRecord):
    goals: list[CareerGoal]
    records: list[FinancialRecord]
    totals: FinancialTotals
    advice: str


class ProfileView(DomainRecord):
    profile: AthleteProfile
    bmi: float


# -------------------------------------------------------------------
# Pipeline
# -------------------------------------------------------------------


class DashboardPipeline:
    """Builds the dashboard views from a data provider and a narrative gateway.

    Both collaborators are injected; the risk engine and aggregator are
    called as pure functions between the join and the narrate stage.
    """

    def __init__(self, provider: DataProvider, gateway: NarrativeGateway | None = None) -> None:
        self.provider = provider
        self.gateway = gateway or StaticNarrativeGateway()

    async def dashboard(self) -> DashboardView:
        profile, logs = await asyncio.gather(
            self.provider.get_athlete_profile(),
            self.provider.get_performance_logs(),
        )
        logger.debug("Dashboard inputs joined", athlete_id=profile.id, log_count=len(logs))

        insight = await self.gateway.dashboard_insight(profile.name, logs)

        return DashboardView(profile=profile, last_session=last_session(logs), insight=insight)

    async def performance(self) -> PerformanceView:
        logs = await self.provider.get_performance_logs()
        return PerformanceView(
            logs=logs,
            sprint_series=sprint_series(logs),
            strain_series=strain_series(logs),
        )

    async def injury_rehab(self) -> InjuryRehabView:
        """Score injury risk and attach the narrative explanation.

        Raises:
            DataUnavailable: If logs or injuries cannot be fetched
            InsufficientData: If there are no performance logs; the gateway is not called
        """
        logs, injuries = await asyncio.gather(
            self.provider.get_performance_logs(),
            self.provider.get_injury_history(),
        )

        prediction = predict_injury_risk(logs, injuries)
        risk_level = risk_level_for_score(prediction.score)
        logger.info(
            "Injury risk assessed",
            score=round(prediction.score, 2),
            risk_level=risk_level.value,
            active_injuries=prediction.active_injuries,
        )

        explanation = await self.gateway.explain_injury_risk(prediction.score, prediction.factors, logs)

        assessment = InjuryRiskAssessment(
            risk_score=prediction.score,
            risk_level=risk_level,
            factors=prediction.factors,
            explanation=explanation.explanation,
            tips=explanation.tips,
        )
        return InjuryRehabView(assessment=assessment, injuries=injuries)

    async def diet(self) -> DietView:
        logs = await self.provider.get_diet_logs()
        analysis = await self.gateway.analyze_diet(logs)
        return DietView(
            logs=logs,
            totals=macro_totals(logs),
            distribution=macro_distribution(logs),
            analysis=analysis,
        )

    async def finance_career(self) -> FinanceCareerView:
        records, goals = await asyncio.gather(
            self.provider.get_financial_records(),
            self.provider.get_career_goals(),
        )
        advice = await self.gateway.finance_advice(records)
        return FinanceCareerView(
            goals=goals,
            records=records,
            totals=financial_totals(records),
            advice=advice,
        )

    async def profile(self) -> ProfileView:
        profile = await self.provider.get_athlete_profile()
        return ProfileView(profile=profile, bmi=profile.bmi)

    async def practice_capture(self, image_base64: str) -> str:
        return await self.gateway.critique_practice_frame(image_base64)
