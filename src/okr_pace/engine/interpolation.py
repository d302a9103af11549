"""Value interpolator.

Computes the value a key result is expected to have at a point in time under
a linear pacing model. Numeric KRs move in a straight line from their start
value on Jan 1 to their target value on Dec 31. Quarter targets, when present,
pin the line at quarter ends and the expected value is interpolated piecewise
between those knots. Maintain KRs are expected to sit at their target the whole
year. Milestones are binary: expected complete from the start of their due date.
"""

from collections.abc import Iterable
from datetime import date, datetime, time
from itertools import pairwise

from okr_pace.engine.periods import (
    QUARTERS,
    elapsed_fraction,
    quarter_bounds,
    year_bounds,
)
from okr_pace.models import KeyResult, KrType, QuarterTarget, as_moment


def quarter_target_map(kr: KeyResult, quarter_targets: Iterable[QuarterTarget]) -> dict[int, float]:
    """Collect the explicit quarter targets belonging to a KR.

    Targets for other KRs are ignored. If a quarter appears twice the later
    entry wins.

    Args:
        kr: Key result.
        quarter_targets: Quarter targets, possibly for several KRs.

    Returns:
        Mapping of quarter number to target value.
    """
    return {qt.quarter: qt.target_value for qt in quarter_targets if qt.kr_id == kr.id}


def annual_value(kr: KeyResult, moment: datetime, year: int) -> float:
    """Value on the straight annual line from start_value to target_value."""
    start, end = year_bounds(year)
    return kr.start_value + kr.value_range * elapsed_fraction(moment, start, end)


def milestone_due(kr: KeyResult, year: int) -> datetime:
    """Instant from which a milestone is expected to be complete.

    That is the start of its due date, by default Dec 31 of the plan year, so
    the whole due day already expects completion.
    """
    return datetime.combine(kr.due_date or date(year, 12, 31), time.min)


def expected_value(
    kr: KeyResult,
    as_of: date | datetime | None,
    year: int | None = None,
    quarter_targets: Iterable[QuarterTarget] = (),
) -> float:
    """Compute the expected value of a KR at a point in time.

    Args:
        kr: Key result.
        as_of: Evaluation time (a bare date means the end of that day).
        year: Plan year, defaults to the KR's own year.
        quarter_targets: Optional quarter targets; only the KR's own are used.

    Returns:
        Expected value in the KR's units. Milestones return 0.0 or 1.0.
    """
    year = kr.year if year is None else year
    moment = as_moment(as_of)

    if kr.kr_type is KrType.MILESTONE:
        return 1.0 if moment >= milestone_due(kr, year) else 0.0
    if kr.is_maintain:
        return kr.target_value

    targets = quarter_target_map(kr, quarter_targets)
    if not targets:
        return annual_value(kr, moment, year)

    knots = _knots(kr, year, targets)
    if moment <= knots[0][0]:
        return knots[0][1]

    for (t0, v0), (t1, v1) in pairwise(knots):
        if moment <= t1:
            return v0 + (v1 - v0) * elapsed_fraction(moment, t0, t1)

    return knots[-1][1]


def expected_progress(
    kr: KeyResult,
    as_of: date | datetime | None,
    year: int | None = None,
    quarter_targets: Iterable[QuarterTarget] = (),
) -> float:
    """Expected value expressed as a fraction of the KR's start-to-target range.

    Maintain KRs always expect 1.0. Degenerate KRs have no range and report 0.0.
    """
    value = expected_value(kr, as_of, year, quarter_targets)
    if kr.kr_type is KrType.MILESTONE:
        return value
    if kr.is_maintain:
        return 1.0
    if kr.is_degenerate:
        return 0.0
    return (value - kr.start_value) / kr.value_range


def _knots(kr: KeyResult, year: int, targets: dict[int, float]) -> list[tuple[datetime, float]]:
    """Build the (instant, value) knots of the piecewise pacing line.

    The first knot is the start value at Jan 1. Each quarter end carries the
    explicit target if one exists, else the annual line's value there.
    """
    year_start, _ = year_bounds(year)
    knots = [(year_start, kr.start_value)]
    for quarter in QUARTERS:
        _, quarter_end = quarter_bounds(year, quarter)
        if quarter in targets:
            knots.append((quarter_end, targets[quarter]))
        else:
            knots.append((quarter_end, annual_value(kr, quarter_end, year)))
    return knots
