"""Insight aggregation.

Summaries consumed by the views and by the narrative request payloads.
Every function is total: empty input gives zero-valued or empty results.
No sorting happens here; callers pass logs in chronological order.
"""

import math
from collections.abc import Sequence

from athlete_dashboard.models.domain import DietLog, FinancialRecord, FinancialRecordType, PerformanceLog
from athlete_dashboard.models.insights import FinancialTotals, MacroSlice, MacroTotals, StrainPoint

SPRINT_MARKER = "Sprint"


def macro_totals(diet_logs: Sequence[DietLog]) -> MacroTotals:
    """Sum macros across all diet logs. No averaging, no per-meal weighting.

    fsum keeps the totals identical for any ordering of the logs.
    """
    return MacroTotals(
        protein=math.fsum(log.protein for log in diet_logs),
        carbs=math.fsum(log.carbs for log in diet_logs),
        fats=math.fsum(log.fats for log in diet_logs),
        calories=math.fsum(log.calories for log in diet_logs),
    )


def macro_distribution(diet_logs: Sequence[DietLog]) -> list[MacroSlice]:
    """Protein/Carbs/Fats slices for the macro distribution chart."""
    totals = macro_totals(diet_logs)
    return [
        MacroSlice(name="Protein", value=totals.protein),
        MacroSlice(name="Carbs", value=totals.carbs),
        MacroSlice(name="Fats", value=totals.fats),
    ]


def financial_totals(records: Sequence[FinancialRecord]) -> FinancialTotals:
    return FinancialTotals(
        income=math.fsum(r.amount for r in records if r.record_type == FinancialRecordType.INCOME),
        expense=math.fsum(r.amount for r in records if r.record_type == FinancialRecordType.EXPENSE),
    )


def last_session(logs: Sequence[PerformanceLog]) -> PerformanceLog | None:
    """Final log in received order, or None when there are no logs."""
    if not logs:
        return None
    return logs[-1]


def sprint_series(logs: Sequence[PerformanceLog]) -> list[PerformanceLog]:
    """Logs whose metric contains "Sprint" (case-sensitive), order preserved."""
    return [log for log in logs if SPRINT_MARKER in log.metric]


def strain_series(logs: Sequence[PerformanceLog]) -> list[StrainPoint]:
    return [StrainPoint(date=log.date, strain=log.strain) for log in logs]


def recent_logs(logs: Sequence[PerformanceLog], count: int) -> list[PerformanceLog]:
    """Last ``count`` logs in received order."""
    if count <= 0:
        return []
    return list(logs)[-count:]
