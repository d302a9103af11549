"""Progress calculator.

Turns a key result and its check-in history into a ProgressResult: the
current value, the unclamped progress fraction, the expected value at the
evaluation instant, and the pace status. Results are recomputed on every call;
callers own any caching.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from okr_pace.config import PaceThresholds
from okr_pace.engine.interpolation import expected_progress, expected_value
from okr_pace.engine.pace import classify_pace
from okr_pace.engine.periods import year_bounds
from okr_pace.models import (
    CheckIn,
    KeyResult,
    KrDirection,
    KrType,
    PaceStatus,
    QuarterTarget,
    as_moment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressResult:
    """Computed progress of one key result at one instant."""

    kr_id: str
    progress: float
    current_value: float
    expected_value: float
    expected_progress: float
    pace_status: PaceStatus
    evaluated_at: datetime
    is_degenerate: bool
    start_value: float
    target_value: float
    delta_to_target: float
    forecast_value: float | None
    days_elapsed: int
    days_remaining: int
    last_check_in_at: datetime | None
    check_in_count: int


def check_ins_for(
    kr: KeyResult,
    check_ins: Iterable[CheckIn],
    until: datetime | None = None,
) -> list[CheckIn]:
    """Select a KR's check-ins, sorted by recorded time ascending.

    The sort is stable, so check-ins sharing a timestamp keep their input order.

    Args:
        kr: Key result.
        check_ins: Check-ins, possibly for several KRs.
        until: Drop check-ins recorded after this instant.

    Returns:
        The KR's check-ins in chronological order.
    """
    selected = [
        ci for ci in check_ins if ci.kr_id == kr.id and (until is None or ci.recorded_at <= until)
    ]
    return sorted(selected, key=lambda ci: ci.recorded_at)


def latest_check_in(check_ins: Iterable[CheckIn]) -> CheckIn | None:
    """Check-in with the latest timestamp; on ties the later one in input order."""
    latest: CheckIn | None = None
    for ci in check_ins:
        if latest is None or ci.recorded_at >= latest.recorded_at:
            latest = ci
    return latest


def is_truthy(value: float) -> bool:
    """Whether a recorded value marks a milestone as completed."""
    return value != 0 and not math.isnan(value)


def current_value(kr: KeyResult, check_ins: Iterable[CheckIn]) -> float:
    """Current value of a KR from its own check-ins.

    With no check-ins a numeric KR sits at start_value. Otherwise metric and
    rate KRs take the latest check-in's value, count KRs the sum of all values
    and average KRs their mean. Milestones are 1.0 once any check-in recorded a
    truthy value.
    """
    check_ins = list(check_ins)
    if kr.kr_type is KrType.MILESTONE:
        return 1.0 if any(is_truthy(ci.value) for ci in check_ins) else 0.0
    if not check_ins:
        return kr.start_value
    if kr.kr_type is KrType.COUNT:
        return sum(ci.value for ci in check_ins)
    if kr.kr_type is KrType.AVERAGE:
        return sum(ci.value for ci in check_ins) / len(check_ins)

    latest = latest_check_in(check_ins)
    return kr.start_value if latest is None else latest.value


@dataclass
class RunningValue:
    """A KR's current value, folded one check-in at a time.

    Check-ins must be added in recorded-time order. After any prefix of a
    KR's history, `value` equals current_value over that prefix.
    """

    kr: KeyResult
    latest: float | None = None
    total: float = 0.0
    count: int = 0
    completed: bool = False

    def add(self, ci: CheckIn) -> None:
        """Fold in the next check-in."""
        self.latest = ci.value
        self.total += ci.value
        self.count += 1
        self.completed = self.completed or is_truthy(ci.value)

    @property
    def value(self) -> float:
        """Current value after the check-ins added so far."""
        if self.kr.kr_type is KrType.MILESTONE:
            return 1.0 if self.completed else 0.0
        if self.latest is None:
            return self.kr.start_value
        if self.kr.kr_type is KrType.COUNT:
            return self.total
        if self.kr.kr_type is KrType.AVERAGE:
            return self.total / self.count
        return self.latest


def progress_fraction(kr: KeyResult, value: float) -> float:
    """Progress of a value along the KR's start-to-target range.

    The result is not clamped: over-achievement exceeds 1 and regression below
    the baseline is negative. Decreasing KRs work the same way since their
    range is negative. Maintain KRs score closeness to the target instead,
    from 1.0 on target down to 0.0 at the edge of the tolerance band and
    beyond. Degenerate KRs report 0.0.
    """
    if kr.kr_type is KrType.MILESTONE:
        return value
    if kr.is_maintain:
        return max(0.0, 1.0 - abs(value - kr.target_value) / kr.tolerance)
    if kr.is_degenerate:
        return 0.0
    return (value - kr.start_value) / kr.value_range


def delta_to_target(kr: KeyResult, value: float) -> float:
    """Signed distance from the target, positive when past it in the wanted direction."""
    if kr.direction is KrDirection.DECREASE:
        return kr.target_value - value
    return value - kr.target_value


def forecast_value(kr: KeyResult, value: float, moment: datetime, year: int) -> float | None:
    """Project the year-end value by extending the current run-rate.

    Returns None for milestones, which have no partial values to extrapolate.
    Maintain KRs are projected to hold their current value.
    """
    if kr.kr_type is KrType.MILESTONE:
        return None
    if kr.is_maintain:
        return value

    year_start, year_end = year_bounds(year)
    elapsed_days = max(1, (moment - year_start).days)
    remaining_days = max(0, (year_end - moment).days)
    rate_per_day = (value - kr.start_value) / elapsed_days
    return value + rate_per_day * remaining_days


def compute_kr_progress(
    kr: KeyResult,
    check_ins: Iterable[CheckIn],
    quarter_targets: Iterable[QuarterTarget] = (),
    year: int | None = None,
    *,
    as_of: date | datetime | None = None,
    thresholds: PaceThresholds | None = None,
) -> ProgressResult:
    """Compute the progress of a key result.

    Only check-ins belonging to the KR and recorded at or before the
    evaluation instant are considered.

    Args:
        kr: Key result to evaluate.
        check_ins: Check-ins, possibly for several KRs.
        quarter_targets: Quarter targets, possibly for several KRs.
        year: Plan year, defaults to the KR's own year.
        as_of: Evaluation time; defaults to now. A bare date means end of day.
        thresholds: Pace classification floors.

    Returns:
        ProgressResult with unclamped progress. A degenerate numeric KR
        (target equals start) reports progress 0 and is_degenerate=True.
    """
    year = kr.year if year is None else year
    moment = as_moment(as_of)
    quarter_targets = list(quarter_targets)
    history = check_ins_for(kr, check_ins, until=moment)

    value = current_value(kr, history)
    progress = progress_fraction(kr, value)
    expected = expected_value(kr, moment, year, quarter_targets)
    expected_fraction = expected_progress(kr, moment, year, quarter_targets)

    if kr.is_degenerate:
        logger.debug(
            "KR %s has equal start and target values, reporting zero progress",
            kr.id,
            extra={"kr_id": kr.id},
        )

    year_start, year_end = year_bounds(year)
    latest = latest_check_in(history)

    return ProgressResult(
        kr_id=kr.id,
        progress=progress,
        current_value=value,
        expected_value=expected,
        expected_progress=expected_fraction,
        pace_status=classify_pace(progress, expected_fraction, thresholds),
        evaluated_at=moment,
        is_degenerate=kr.is_degenerate,
        start_value=kr.start_value,
        target_value=kr.target_value,
        delta_to_target=delta_to_target(kr, value),
        forecast_value=forecast_value(kr, value, moment, year),
        days_elapsed=max(0, (moment - year_start).days),
        days_remaining=max(0, (year_end - moment).days),
        last_check_in_at=latest.recorded_at if latest else None,
        check_in_count=len(history),
    )
