"""Pace classifier.

Compares actual progress against time-proportional expected progress. The
floors live in PaceThresholds so policy can change without touching the
algorithm:

    delta = progress - expected
    delta >= on_track_floor                   -> on_track
    at_risk_floor <= delta < on_track_floor   -> at_risk
    delta < at_risk_floor                     -> off_track

Running ahead of pace is still on_track; there is no separate "ahead" bucket.
"""

from collections.abc import Iterable

from okr_pace.config import DEFAULT_PACE_THRESHOLDS, PaceThresholds
from okr_pace.models import PaceStatus

# Float noise within this distance of a floor counts as on the floor
_EPSILON = 1e-9

PACE_SEVERITY = {
    PaceStatus.ON_TRACK: 0,
    PaceStatus.AT_RISK: 1,
    PaceStatus.OFF_TRACK: 2,
}


def classify_pace(
    progress: float,
    expected: float,
    thresholds: PaceThresholds | None = None,
) -> PaceStatus:
    """Classify pace from actual and expected progress fractions.

    Args:
        progress: Actual progress fraction (unclamped).
        expected: Expected progress fraction at the same instant.
        thresholds: Classification floors, defaults to DEFAULT_PACE_THRESHOLDS.

    Returns:
        Pace status. A NaN delta classifies as off_track.
    """
    thresholds = thresholds or DEFAULT_PACE_THRESHOLDS
    delta = progress - expected

    if delta >= thresholds.on_track_floor - _EPSILON:
        return PaceStatus.ON_TRACK
    if delta >= thresholds.at_risk_floor - _EPSILON:
        return PaceStatus.AT_RISK
    return PaceStatus.OFF_TRACK


def worst_pace(statuses: Iterable[PaceStatus]) -> PaceStatus:
    """Most severe status in a collection; on_track when it is empty."""
    return max(statuses, key=PACE_SEVERITY.__getitem__, default=PaceStatus.ON_TRACK)
