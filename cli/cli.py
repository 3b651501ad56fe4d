"""CLI for the athlete dashboard.

Developer CLI that renders each dashboard screen in the terminal using the
same pipeline, data provider and narrative gateway as any other front end.
"""

import asyncio
import base64
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from athlete_dashboard.config.settings import settings
from athlete_dashboard.core.errors import DashboardError
from athlete_dashboard.core.logger import setup_logger
from athlete_dashboard.data.factory import build_data_provider
from athlete_dashboard.models.domain import DomainRecord
from athlete_dashboard.models.insights import RiskLevel
from athlete_dashboard.pipeline.dashboard_pipeline import (
    DashboardPipeline,
    DashboardView,
    DietView,
    FinanceCareerView,
    InjuryRehabView,
    PerformanceView,
    ProfileView,
)
from athlete_dashboard.services.narrative.gateway import StaticNarrativeGateway, build_narrative_gateway

V = TypeVar("V")

console = Console()

app = typer.Typer(
    name="athlete-dashboard",
    help="Athlete dashboard CLI - performance, injury, diet and finance views",
    add_completion=False,
)

RISK_COLORS: dict[RiskLevel, str] = {
    RiskLevel.LOW: "green",
    RiskLevel.MODERATE: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}


class CLIState:
    offline: bool = False
    as_json: bool = False


state = CLIState()


@app.callback()
def main(
    offline: bool = typer.Option(False, "--offline", help="Serve static commentary instead of calling the LLM"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw view as JSON"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    setup_logger(level="DEBUG" if debug else settings.log_level)
    state.offline = offline
    state.as_json = as_json


async def _run_view(view: Callable[[DashboardPipeline], Awaitable[V]]) -> V:
    provider = build_data_provider(settings)
    gateway = StaticNarrativeGateway() if state.offline else build_narrative_gateway(settings)
    try:
        return await view(DashboardPipeline(provider, gateway))
    finally:
        aclose = getattr(provider, "aclose", None)
        if aclose is not None:
            await aclose()


def _load(view: Callable[[DashboardPipeline], Awaitable[V]]) -> V:
    """Run one pipeline coroutine, turning dashboard errors into exit code 1."""
    try:
        return asyncio.run(_run_view(view))
    except DashboardError as e:
        logger.error(f"Loading failed: {e}")
        console.print(f"[red]Loading failed:[/red] {e.reason}")
        raise typer.Exit(code=1) from e


def _print_json(view: DomainRecord) -> None:
    console.print(JSON(view.model_dump_json(by_alias=True)))


@app.command()
def dashboard() -> None:
    """Athlete overview with the latest session and weekly focus."""
    view: DashboardView = _load(lambda p: p.dashboard())
    if state.as_json:
        _print_json(view)
        return

    console.print(Panel(f"[bold]{view.profile.name}[/bold]\n{view.profile.sport}", title="Athlete"))
    if view.last_session is None:
        console.print("[dim]No sessions logged yet.[/dim]")
    else:
        session = view.last_session
        console.print(
            Panel(
                f"{session.value} {session.unit}\n{session.metric}",
                title=f"Last Session ({session.date.isoformat()})",
            )
        )
    console.print(
        Panel(
            f"{escape(view.insight.motivation)}\n\n[bold]Focus:[/bold] {escape(view.insight.focus_area)}",
            title="Coach Insight",
        )
    )


@app.command()
def performance() -> None:
    """Training logs with the sprint series and daily strain."""
    view: PerformanceView = _load(lambda p: p.performance())
    if state.as_json:
        _print_json(view)
        return

    table = Table(title="Recent Logs")
    table.add_column("Date")
    table.add_column("Metric")
    table.add_column("Value", style="green")
    table.add_column("Strain")
    for log in view.logs:
        table.add_row(log.date.isoformat(), log.metric, f"{log.value:g} {log.unit}", f"{log.strain:g}/10")
    console.print(table)

    sprints = ", ".join(f"{log.date.strftime('%m/%d')}: {log.value:g}{log.unit}" for log in view.sprint_series)
    console.print(Panel(sprints or "No sprint sessions.", title="Sprint Progression"))


@app.command()
def injury() -> None:
    """Injury risk score, contributing factors and recovery tips."""
    view: InjuryRehabView = _load(lambda p: p.injury_rehab())
    if state.as_json:
        _print_json(view)
        return

    assessment = view.assessment
    color = RISK_COLORS[assessment.risk_level]
    body = [
        f"[{color}]{assessment.risk_score * 100:.0f}% - {assessment.risk_level.value} Risk[/{color}]",
        "",
        *(f"• {factor}" for factor in assessment.factors),
        "",
        escape(assessment.explanation),
    ]
    if assessment.tips:
        body.append("")
        body.extend(f"{i}. {escape(tip)}" for i, tip in enumerate(assessment.tips, start=1))
    console.print(Panel("\n".join(body), title="Injury Risk"))

    table = Table(title="Injury History")
    table.add_column("Date")
    table.add_column("Area")
    table.add_column("Severity")
    table.add_column("Status")
    table.add_column("Pain")
    for record in view.injuries:
        table.add_row(
            record.date.isoformat(),
            record.area,
            record.severity.value,
            record.status.value,
            f"{record.pain_level:g}/10",
        )
    console.print(table)


@app.command()
def diet() -> None:
    """Macro totals and diet analysis."""
    view: DietView = _load(lambda p: p.diet())
    if state.as_json:
        _print_json(view)
        return

    table = Table(title="Macro Distribution")
    table.add_column("Macro")
    table.add_column("Grams", justify="right")
    for macro in view.distribution:
        table.add_row(macro.name, f"{macro.value:g}")
    table.add_row("[dim]Calories[/dim]", f"[dim]{view.totals.calories:g}[/dim]")
    console.print(table)

    analysis = view.analysis
    lines = [f"[bold]{analysis.status.value}[/bold] ({escape(analysis.macro_balance)})", ""]
    lines.extend(f"• {escape(rec)}" for rec in analysis.recommendations)
    console.print(Panel("\n".join(lines), title="Diet Analysis"))


@app.command()
def finance() -> None:
    """Career goals, income/expense totals and budgeting advice."""
    view: FinanceCareerView = _load(lambda p: p.finance_career())
    if state.as_json:
        _print_json(view)
        return

    goals = Table(title="Career Goals")
    goals.add_column("Goal")
    goals.add_column("Target")
    goals.add_column("Status")
    for goal in view.goals:
        goals.add_row(goal.title, goal.target_date.isoformat(), goal.status.value)
    console.print(goals)

    console.print(
        Panel(
            f"[green]Income: ₹{view.totals.income:,.0f}[/green]\n[red]Expense: ₹{view.totals.expense:,.0f}[/red]",
            title="Finances",
        )
    )
    console.print(Panel(escape(view.advice), title="Budget Tip"))


@app.command()
def profile() -> None:
    """Athlete profile."""
    view: ProfileView = _load(lambda p: p.profile())
    if state.as_json:
        _print_json(view)
        return

    athlete = view.profile
    table = Table(title=athlete.name, show_header=False)
    table.add_row("Sport", athlete.sport)
    table.add_row("Role", athlete.role.value)
    table.add_row("Age", str(athlete.age))
    table.add_row("Height", f"{athlete.height_cm:g} cm")
    table.add_row("Weight", f"{athlete.weight_kg:g} kg")
    table.add_row("BMI", f"{view.bmi:.1f}")
    console.print(table)


@app.command()
def practice(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Captured practice frame"),
) -> None:
    """Technique critique for one captured practice frame."""
    image_base64 = base64.b64encode(image_path.read_bytes()).decode("ascii")
    critique: str = _load(lambda p: p.practice_capture(image_base64))
    if state.as_json:
        console.print(JSON.from_data({"critique": critique}))
        return
    console.print(Panel(escape(critique), title="Coach Feedback"))


if __name__ == "__main__":
    app()
