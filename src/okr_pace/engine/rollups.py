"""Objective and plan rollups.

Objective progress is the weight-averaged progress of its KRs, and plan
progress the weight-averaged progress of its objectives. Weights that are not
positive count as 1. The rolled-up pace is the worst pace among the children.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from okr_pace.engine.calculator import ProgressResult
from okr_pace.engine.pace import worst_pace
from okr_pace.models import KeyResult, Objective, PaceStatus


@dataclass(frozen=True)
class KrContribution:
    """One KR's share of an objective rollup."""

    kr_id: str
    progress: float
    weight: float
    pace_status: PaceStatus


@dataclass(frozen=True)
class ObjectiveProgress:
    """Rolled-up progress of an objective."""

    objective_id: str
    progress: float
    expected_progress: float
    pace_status: PaceStatus
    kr_count: int
    kr_progresses: list[KrContribution] = field(default_factory=list)


@dataclass(frozen=True)
class PlanProgress:
    """Rolled-up progress of a plan."""

    plan_id: str
    progress: float
    expected_progress: float
    pace_status: PaceStatus
    objective_count: int
    objective_progresses: list[ObjectiveProgress] = field(default_factory=list)


def compute_objective_progress(
    objective: Objective,
    kr_progresses: Sequence[tuple[KeyResult, ProgressResult]],
) -> ObjectiveProgress:
    """Roll KR results up into objective progress.

    Args:
        objective: The objective.
        kr_progresses: Pairs of KR and its computed progress.

    Returns:
        ObjectiveProgress; with no KRs, progress is 0 and pace on_track.
    """
    contributions = [
        KrContribution(
            kr_id=kr.id,
            progress=result.progress,
            weight=_weight(kr.weight),
            pace_status=result.pace_status,
        )
        for kr, result in kr_progresses
    ]
    expected = [result.expected_progress for _, result in kr_progresses]
    weights = [c.weight for c in contributions]

    return ObjectiveProgress(
        objective_id=objective.id,
        progress=_weighted_mean([c.progress for c in contributions], weights),
        expected_progress=_weighted_mean(expected, weights),
        pace_status=worst_pace(c.pace_status for c in contributions),
        kr_count=len(contributions),
        kr_progresses=contributions,
    )


def compute_plan_progress(
    plan_id: str,
    objective_progresses: Sequence[tuple[Objective, ObjectiveProgress]],
) -> PlanProgress:
    """Roll objective progress up into plan progress.

    Args:
        plan_id: Plan identifier.
        objective_progresses: Pairs of objective and its rolled-up progress.

    Returns:
        PlanProgress; with no objectives, progress is 0 and pace on_track.
    """
    weights = [_weight(obj.weight) for obj, _ in objective_progresses]
    children = [progress for _, progress in objective_progresses]

    return PlanProgress(
        plan_id=plan_id,
        progress=_weighted_mean([p.progress for p in children], weights),
        expected_progress=_weighted_mean([p.expected_progress for p in children], weights),
        pace_status=worst_pace(p.pace_status for p in children),
        objective_count=len(children),
        objective_progresses=children,
    )


def rollup_plan(
    plan_id: str,
    objectives: Iterable[Objective],
    krs: Iterable[KeyResult],
    results: Iterable[ProgressResult],
) -> PlanProgress:
    """Group KR results under their objectives and roll everything up.

    KRs without a result, and KRs whose objective is not listed, are left
    out.
    """
    by_kr = {result.kr_id: result for result in results}
    grouped: defaultdict[str, list[tuple[KeyResult, ProgressResult]]] = defaultdict(list)
    for kr in krs:
        if kr.objective_id is not None and kr.id in by_kr:
            grouped[kr.objective_id].append((kr, by_kr[kr.id]))

    objective_progresses = [
        (objective, compute_objective_progress(objective, grouped.get(objective.id, [])))
        for objective in objectives
    ]
    return compute_plan_progress(plan_id, objective_progresses)


def _weight(weight: float) -> float:
    return weight if weight > 0 else 1.0


def _weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    total_weight = sum(weights)
    if total_weight <= 0:
        return 0.0
    return sum(v * w for v, w in zip(values, weights, strict=True)) / total_weight
