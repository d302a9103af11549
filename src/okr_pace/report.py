"""Report rendering for engine results.

Converts summaries into JSON-ready dictionaries and rich tables. Rounding and
clamping for display happen here, never in the engine.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel
from rich.table import Table

from okr_pace.engine.analytics import AnalyticsSummary
from okr_pace.engine.calculator import ProgressResult
from okr_pace.engine.quarterly import QuarterSummary
from okr_pace.engine.rollups import PlanProgress
from okr_pace.models import KeyResult, PaceStatus

PACE_LABELS = {
    PaceStatus.ON_TRACK: "[green]On Track[/green]",
    PaceStatus.AT_RISK: "[yellow]At Risk[/yellow]",
    PaceStatus.OFF_TRACK: "[red]Off Track[/red]",
}


def to_jsonable(value: Any) -> Any:
    """Recursively convert engine output into JSON-serializable values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return to_jsonable(value.model_dump())
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, Mapping):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    return value


def summary_to_dict(summary: AnalyticsSummary) -> dict[str, Any]:
    """Convert an analytics summary into a JSON-ready dictionary."""
    data: dict[str, Any] = to_jsonable(summary)
    return data


def format_percent(fraction: float) -> str:
    """Format a progress fraction as a whole percentage."""
    if fraction != fraction:  # NaN
        return "n/a"
    return f"{round(fraction * 100)}%"


def build_kr_table(krs: Iterable[KeyResult], results: Iterable[ProgressResult]) -> Table:
    """Build a table with one row per evaluated key result."""
    names = {kr.id: kr.name or kr.id for kr in krs}
    units = {kr.id: kr.unit or "" for kr in krs}

    table = Table(title="Key Results")
    table.add_column("Key Result")
    table.add_column("Current", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Pace")

    for result in results:
        unit = units.get(result.kr_id, "")
        name = names.get(result.kr_id, result.kr_id)
        if result.is_degenerate:
            name = f"{name} [dim](start = target)[/dim]"
        table.add_row(
            name,
            f"{result.current_value:,.1f} {unit}".strip(),
            f"{result.expected_value:,.1f} {unit}".strip(),
            f"{result.target_value:,.1f} {unit}".strip(),
            format_percent(result.progress),
            PACE_LABELS[result.pace_status],
        )
    return table


def build_quarter_table(kr: KeyResult, summaries: Iterable[QuarterSummary]) -> Table:
    """Build a quarter-by-quarter comparison table for one key result."""
    table = Table(title=f"Quarterly Breakdown: {kr.name or kr.id}")
    table.add_column("Quarter")
    table.add_column("Expected", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Variance", justify="right")
    table.add_column("Check-ins", justify="right")

    for summary in summaries:
        marker = "*" if summary.has_explicit_target else ""
        table.add_row(
            f"Q{summary.quarter}{marker}",
            f"{summary.expected_value:,.1f}",
            f"{summary.actual_value:,.1f}",
            f"{summary.variance:+,.1f} ({format_percent(summary.variance_pct)})",
            str(summary.check_in_count),
        )
    return table


def build_objective_table(plan: PlanProgress) -> Table:
    """Build a table of objective rollups for a plan."""
    table = Table(title=f"Objectives ({format_percent(plan.progress)} overall)")
    table.add_column("Objective")
    table.add_column("KRs", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Pace")

    for objective in plan.objective_progresses:
        table.add_row(
            objective.objective_id,
            str(objective.kr_count),
            format_percent(objective.progress),
            format_percent(objective.expected_progress),
            PACE_LABELS[objective.pace_status],
        )
    return table
