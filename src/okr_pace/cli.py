"""CLI entry point for okr-pace.

Commands:
- report: Evaluate every key result in a snapshot and print the analytics summary
- quarters: Print the quarter-by-quarter breakdown of one key result
"""

import json
from datetime import UTC, date, datetime
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from okr_pace import __version__
from okr_pace.config import Config, load_config
from okr_pace.engine.analytics import aggregate_analytics
from okr_pace.engine.quarterly import compute_quarterly_breakdown
from okr_pace.engine.rollups import rollup_plan
from okr_pace.logging import get_logger, setup_logging
from okr_pace.models import DateRange
from okr_pace.report import (
    build_kr_table,
    build_objective_table,
    build_quarter_table,
    format_percent,
    summary_to_dict,
    to_jsonable,
)
from okr_pace.snapshot import Snapshot, load_snapshot

console = Console()
logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="okr-pace")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
@click.option(
    "--log-json", is_flag=True, default=False, help="Write log lines to stderr as JSON"
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, log_json: bool) -> None:
    """OKR progress and pace analytics.

    Evaluate key results from a YAML or JSON snapshot of a plan: progress,
    expected pace, quarterly comparisons, burn-up and velocity.

    \b
    Quick Start:
        okr-pace report --snapshot plan.yaml --as-of 2026-07-01
        okr-pace quarters --snapshot plan.yaml --kr kr-1
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose=verbose, json_format=log_json)


def _load_inputs(snapshot_path: Path, config_path: Path | None) -> tuple[Snapshot, Config]:
    """Load snapshot and config, reporting boundary errors and aborting."""
    try:
        snapshot = load_snapshot(snapshot_path)
        cfg = load_config(config_path) if config_path else Config()
    except (ValidationError, ValueError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise click.Abort() from e
    return snapshot, cfg


def _reporting_range(year: int, as_of: date) -> DateRange:
    """Range from Jan 1 of the plan year up to as_of, kept inside the year."""
    year_start = date(year, 1, 1)
    end = min(max(as_of, year_start), date(year, 12, 31))
    return DateRange(start=year_start, end=end)


@main.command()
@click.option(
    "--snapshot",
    "-s",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to the plan snapshot (.yaml, .yml or .json)",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to config.yaml file",
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Evaluation date (default: today)",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of tables")
def report(snapshot: Path, config: Path | None, as_of: datetime | None, as_json: bool) -> None:
    """Evaluate all key results in a snapshot and print the summary."""
    data, cfg = _load_inputs(snapshot, config)

    as_of_date = as_of.date() if as_of else datetime.now(UTC).date()
    year = cfg.year or data.year or as_of_date.year
    date_range = _reporting_range(year, as_of_date)

    krs = [kr for kr in data.key_results if kr.year == year]
    if len(krs) < len(data.key_results):
        logger.info("Skipping %d key results outside %d", len(data.key_results) - len(krs), year)

    summary = aggregate_analytics(
        krs,
        data.check_ins,
        data.tasks,
        date_range,
        quarter_targets=data.quarter_targets,
        thresholds=cfg.pace,
        settings=cfg.analytics,
    )

    if as_json:
        click.echo(json.dumps(summary_to_dict(summary), indent=2, default=str))
        return

    console.print(f"[bold]{cfg.report.title} ({year}, as of {date_range.end.isoformat()})[/bold]")
    console.print()
    console.print(build_kr_table(krs, summary.kr_results))

    if data.objectives:
        plan = rollup_plan(data.plan_id, data.objectives, krs, summary.kr_results)
        console.print(build_objective_table(plan))

    console.print()
    console.print(f"  Overall progress: {format_percent(summary.overall_progress)}")
    for status, count in summary.pace_counts.items():
        console.print(f"  {status.value}: {count}")
    console.print(f"  KRs completed: {summary.krs_completed}/{summary.total_krs}")
    console.print(f"  Task velocity: {summary.task_velocity:.1f} per week")
    if summary.productivity and summary.productivity.most_productive_day:
        console.print(f"  Most productive day: {summary.productivity.most_productive_day}")
        console.print(f"  Current streak: {summary.productivity.current_streak} days")

    if cfg.report.show_quarters:
        recorded = [ci for ci in data.check_ins if ci.recorded_at <= date_range.end_moment]
        for kr in krs:
            breakdown = compute_quarterly_breakdown(kr, recorded, data.quarter_targets, year)
            console.print(build_quarter_table(kr, breakdown))


@main.command()
@click.option(
    "--snapshot",
    "-s",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to the plan snapshot (.yaml, .yml or .json)",
)
@click.option("--kr", "kr_id", required=True, help="Key result id")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of a table")
def quarters(snapshot: Path, kr_id: str, as_json: bool) -> None:
    """Print the quarter-by-quarter breakdown of one key result."""
    data, _ = _load_inputs(snapshot, None)

    kr = data.key_result(kr_id)
    if kr is None:
        console.print(
            f"[bold red]Error:[/bold red] Key result '{escape(kr_id)}' not found in {snapshot}"
        )
        raise click.Abort()

    breakdown = compute_quarterly_breakdown(kr, data.check_ins, data.quarter_targets)

    if as_json:
        click.echo(json.dumps(to_jsonable(breakdown), indent=2))
        return

    console.print(build_quarter_table(kr, breakdown))


if __name__ == "__main__":
    main()
