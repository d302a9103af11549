"""Quarterly aggregator.

Rolls annual KR progress into one target-versus-actual comparison per quarter.
Quarter ends are the same instants the value interpolator uses, so an
untargeted quarter's expected value equals expected_value at its end date.

Cumulative KRs report end-of-quarter snapshots (the value folded from every
check-in on or before the quarter's end), not quarter deltas. Reset-quarterly
KRs fold only the check-ins recorded inside the quarter and, without an
explicit target, expect the start value plus the annual line's growth over
that quarter. A quarter with no check-ins in its window carries the KR's start
value forward so charted series stay continuous.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from okr_pace.engine.calculator import check_ins_for, current_value
from okr_pace.engine.interpolation import annual_value, milestone_due, quarter_target_map
from okr_pace.engine.periods import QUARTERS, quarter_bounds
from okr_pace.models import CheckIn, KeyResult, KrAggregation, KrType, QuarterTarget


@dataclass(frozen=True)
class QuarterSummary:
    """Expected versus actual KR value at the end of one quarter."""

    quarter: int
    start: date
    end: date
    expected_value: float
    actual_value: float
    variance: float
    variance_pct: float
    has_explicit_target: bool
    check_in_count: int


def compute_quarterly_breakdown(
    kr: KeyResult,
    check_ins: Iterable[CheckIn],
    quarter_targets: Iterable[QuarterTarget] = (),
    year: int | None = None,
) -> list[QuarterSummary]:
    """Compute a per-quarter comparison for a key result.

    Args:
        kr: Key result.
        check_ins: Check-ins, possibly for several KRs.
        quarter_targets: Quarter targets, possibly for several KRs.
        year: Plan year, defaults to the KR's own year.

    Returns:
        Four QuarterSummary entries, Q1 through Q4. variance_pct is the
        variance as a fraction of the KR's start-to-target range (0.0 when
        the range is zero).
    """
    year = kr.year if year is None else year
    targets = quarter_target_map(kr, quarter_targets)
    history = check_ins_for(kr, check_ins)
    resets = kr.aggregation is KrAggregation.RESET_QUARTERLY and kr.kr_type is not KrType.MILESTONE

    summaries = []
    for quarter in QUARTERS:
        quarter_start, quarter_end = quarter_bounds(year, quarter)

        if quarter in targets:
            expected = targets[quarter]
        else:
            expected = _untargeted_expectation(kr, year, quarter_start, quarter_end, resets)

        in_quarter = [ci for ci in history if quarter_start <= ci.recorded_at <= quarter_end]
        window = in_quarter if resets else [ci for ci in history if ci.recorded_at <= quarter_end]
        actual = current_value(kr, window)
        variance = actual - expected
        value_range = kr.value_range

        summaries.append(
            QuarterSummary(
                quarter=quarter,
                start=quarter_start.date(),
                end=quarter_end.date(),
                expected_value=expected,
                actual_value=actual,
                variance=variance,
                variance_pct=variance / value_range if value_range else 0.0,
                has_explicit_target=quarter in targets,
                check_in_count=len(in_quarter),
            )
        )

    return summaries


def _untargeted_expectation(
    kr: KeyResult,
    year: int,
    quarter_start: datetime,
    quarter_end: datetime,
    resets: bool,
) -> float:
    if kr.kr_type is KrType.MILESTONE:
        return 1.0 if milestone_due(kr, year) <= quarter_end else 0.0
    if kr.is_maintain:
        return kr.target_value
    if resets:
        growth = annual_value(kr, quarter_end, year) - annual_value(kr, quarter_start, year)
        return kr.start_value + growth
    return annual_value(kr, quarter_end, year)
