"""Analytics aggregator.

Summarizes a collection of key results, check-ins and tasks over a reporting
period:
    - pace status counts and the unweighted mean progress across KRs
    - a check-in heatmap with one entry per calendar day of the period
    - task completion velocity, overall and per ISO week
    - a burn-up series rebuilt by replaying check-in history
    - productivity and task metrics for the reporting cards

KRs are evaluated as of the end of the period's last day. Check-ins that
reference a KR not in the provided list are ignored.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from itertools import groupby

import pandas as pd

from okr_pace.config import AnalyticsConfig, PaceThresholds
from okr_pace.engine.calculator import (
    ProgressResult,
    RunningValue,
    compute_kr_progress,
    progress_fraction,
)
from okr_pace.engine.periods import week_end, week_start
from okr_pace.models import CheckIn, DateRange, KeyResult, PaceStatus, QuarterTarget, Task

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class DayCount:
    """Number of check-ins recorded on one calendar day."""

    day: date
    count: int


@dataclass(frozen=True)
class WeekCount:
    """Number of tasks completed during one ISO week."""

    week_start: date
    week_end: date
    count: int


@dataclass(frozen=True)
class BurnupPoint:
    """Mean progress across all KRs right after a check-in timestamp."""

    timestamp: datetime
    progress: float


@dataclass(frozen=True)
class ProductivityStats:
    """Check-in habits over the reporting period."""

    check_ins_by_weekday: dict[str, int]
    most_productive_day: str | None
    avg_check_ins_per_week: float
    current_streak: int


@dataclass(frozen=True)
class TaskMetrics:
    """Task throughput over the reporting period."""

    completed_in_range: int
    active: int
    overdue: int
    avg_completion_days: float
    linked_to_krs: int


@dataclass(frozen=True)
class AnalyticsSummary:
    """Everything the analytics view needs for one reporting period."""

    date_range: DateRange
    total_krs: int = 0
    pace_counts: dict[PaceStatus, int] = field(default_factory=dict)
    overall_progress: float = 0.0
    krs_completed: int = 0
    degenerate_krs: int = 0
    kr_results: list[ProgressResult] = field(default_factory=list)
    check_in_heatmap: list[DayCount] = field(default_factory=list)
    task_velocity: float = 0.0
    weekly_completions: list[WeekCount] = field(default_factory=list)
    burnup: list[BurnupPoint] = field(default_factory=list)
    productivity: ProductivityStats | None = None
    task_metrics: TaskMetrics | None = None
    ignored_check_ins: int = 0


def aggregate_analytics(
    krs: Sequence[KeyResult],
    check_ins: Iterable[CheckIn],
    tasks: Iterable[Task],
    date_range: DateRange,
    *,
    quarter_targets: Iterable[QuarterTarget] = (),
    thresholds: PaceThresholds | None = None,
    settings: AnalyticsConfig | None = None,
) -> AnalyticsSummary:
    """Aggregate KR progress, check-in activity and task throughput.

    Args:
        krs: Key results in scope.
        check_ins: Check-ins; those for KRs outside `krs` are ignored.
        tasks: Tasks in scope.
        date_range: Reporting period, inclusive.
        quarter_targets: Quarter targets for the KRs.
        thresholds: Pace classification floors.
        settings: Analytics settings (streak lookback, velocity week floor).

    Returns:
        AnalyticsSummary. Empty `krs` yields zeroed KR statistics.
    """
    settings = settings or AnalyticsConfig()
    quarter_targets = list(quarter_targets)
    tasks = list(tasks)
    kr_ids = {kr.id for kr in krs}

    all_check_ins = list(check_ins)
    known = [ci for ci in all_check_ins if ci.kr_id in kr_ids]
    ignored = len(all_check_ins) - len(known)
    if ignored:
        logger.debug("Ignoring %d check-ins for key results outside the analysis", ignored)

    results = [
        compute_kr_progress(
            kr,
            known,
            quarter_targets,
            as_of=date_range.end_moment,
            thresholds=thresholds,
        )
        for kr in krs
    ]

    pace_counts = dict.fromkeys(PaceStatus, 0)
    for result in results:
        pace_counts[result.pace_status] += 1

    in_range = [ci for ci in known if date_range.contains(ci.recorded_at)]
    weeks = max(date_range.days / 7, settings.min_weeks)

    return AnalyticsSummary(
        date_range=date_range,
        total_krs=len(krs),
        pace_counts=pace_counts,
        overall_progress=_mean([r.progress for r in results]),
        krs_completed=sum(1 for r in results if r.progress >= 1),
        degenerate_krs=sum(1 for r in results if r.is_degenerate),
        kr_results=results,
        check_in_heatmap=check_in_heatmap(in_range, date_range),
        task_velocity=_completed_in_range(tasks, date_range) / weeks,
        weekly_completions=weekly_completions(tasks, date_range),
        burnup=build_burnup(krs, known, date_range),
        productivity=productivity_stats(in_range, date_range, weeks, settings),
        task_metrics=task_metrics(tasks, date_range),
        ignored_check_ins=ignored,
    )


def build_burnup(
    krs: Sequence[KeyResult],
    check_ins: Iterable[CheckIn],
    date_range: DateRange,
) -> list[BurnupPoint]:
    """Rebuild cumulative progress over time by replaying check-in history.

    Check-ins are replayed in timestamp order (stable for ties). After all
    check-ins sharing a timestamp are applied, a point with the mean progress
    across every KR is emitted if the timestamp falls inside the range.
    History before the range still moves the running state. Per-KR progress
    is kept as running state instead of being recomputed from the full
    history at each step.

    Args:
        krs: Key results; KRs without check-ins contribute their progress at
            start_value (0 for anything but a maintain KR).
        check_ins: Check-ins; those for unknown KRs are ignored.
        date_range: Only timestamps inside the range produce points.

    Returns:
        Burn-up points in chronological order.
    """
    if not krs:
        return []

    by_id = {kr.id: kr for kr in krs}
    running = {kr.id: RunningValue(kr) for kr in krs}
    progress = {kr.id: progress_fraction(kr, running[kr.id].value) for kr in krs}
    events = sorted(
        (
            ci
            for ci in check_ins
            if ci.kr_id in by_id and ci.recorded_at <= date_range.end_moment
        ),
        key=lambda ci: ci.recorded_at,
    )

    points = []
    for timestamp, group in groupby(events, key=lambda ci: ci.recorded_at):
        for ci in group:
            state = running[ci.kr_id]
            state.add(ci)
            progress[ci.kr_id] = progress_fraction(by_id[ci.kr_id], state.value)

        if date_range.contains(timestamp):
            points.append(BurnupPoint(timestamp=timestamp, progress=_mean(progress.values())))

    return points


def check_in_heatmap(check_ins: Iterable[CheckIn], date_range: DateRange) -> list[DayCount]:
    """Count check-ins per calendar day, including zero days.

    Args:
        check_ins: Check-ins to count; those outside the range are dropped.
        date_range: Days to report.

    Returns:
        One DayCount per day of the range, ascending.
    """
    stamps = pd.DatetimeIndex(
        [ci.recorded_at for ci in check_ins if date_range.contains(ci.recorded_at)]
    )
    counts = (
        pd.Series(1, index=stamps.normalize(), dtype="int64")
        .groupby(level=0)
        .sum()
        .reindex(pd.date_range(date_range.start, date_range.end, freq="D"), fill_value=0)
    )
    return [DayCount(day=ts.date(), count=int(n)) for ts, n in counts.items()]


def weekly_completions(tasks: Iterable[Task], date_range: DateRange) -> list[WeekCount]:
    """Count tasks completed per ISO week for every week the range touches.

    Only completions inside the range are counted, so the first and last
    weeks can be partial.
    """
    completed_days = [
        t.completed_at.date()
        for t in tasks
        if t.is_completed and t.completed_at is not None and date_range.contains(t.completed_at)
    ]
    df = pd.DataFrame({"_week_start": [week_start(d) for d in completed_days]}, dtype="object")
    counts = df.groupby("_week_start").size() if not df.empty else pd.Series(dtype="int64")

    weeks = []
    current = week_start(date_range.start)
    while current <= date_range.end:
        weeks.append(
            WeekCount(week_start=current, week_end=week_end(current), count=int(counts.get(current, 0)))
        )
        current += timedelta(days=7)
    return weeks


def productivity_stats(
    check_ins: Iterable[CheckIn],
    date_range: DateRange,
    weeks: float,
    settings: AnalyticsConfig,
) -> ProductivityStats:
    """Summarize check-in habits inside the range.

    The streak counts consecutive days with at least one check-in, walking
    back from the range's last day, for at most `streak_lookback_days`.
    """
    days = [ci.recorded_at.date() for ci in check_ins if date_range.contains(ci.recorded_at)]

    by_weekday = dict.fromkeys(WEEKDAYS, 0)
    for d in days:
        by_weekday[WEEKDAYS[d.weekday()]] += 1

    most_productive = None
    if days:
        most_productive = max(WEEKDAYS, key=by_weekday.__getitem__)

    active_days = set(days)
    streak = 0
    cursor = date_range.end
    while (
        cursor in active_days
        and cursor >= date_range.start
        and streak < settings.streak_lookback_days
    ):
        streak += 1
        cursor -= timedelta(days=1)

    return ProductivityStats(
        check_ins_by_weekday=by_weekday,
        most_productive_day=most_productive,
        avg_check_ins_per_week=len(days) / weeks,
        current_streak=streak,
    )


def task_metrics(tasks: Iterable[Task], date_range: DateRange) -> TaskMetrics:
    """Task counts as of the end of the range.

    Active tasks exclude ones created after the range. A task is overdue when
    it is active and its due date is before the range's last day.
    """
    tasks = list(tasks)
    end = date_range.end_moment

    completed = [
        t for t in tasks if t.is_completed and t.completed_at and date_range.contains(t.completed_at)
    ]
    active = [t for t in tasks if t.is_active and (t.created_at is None or t.created_at <= end)]
    overdue = [t for t in active if t.due_date is not None and t.due_date < date_range.end]

    durations = [
        (t.completed_at - t.created_at).total_seconds() / 86400
        for t in completed
        if t.completed_at and t.created_at
    ]

    return TaskMetrics(
        completed_in_range=len(completed),
        active=len(active),
        overdue=len(overdue),
        avg_completion_days=_mean(durations),
        linked_to_krs=sum(1 for t in tasks if t.kr_id),
    )


def _completed_in_range(tasks: Iterable[Task], date_range: DateRange) -> int:
    return sum(
        1 for t in tasks if t.is_completed and t.completed_at and date_range.contains(t.completed_at)
    )


def _mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for no values."""
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)
