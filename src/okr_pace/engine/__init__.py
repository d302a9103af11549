"""Progress and pace analytics engine: pure functions over typed KR records."""

from okr_pace.engine.analytics import AnalyticsSummary, aggregate_analytics, build_burnup
from okr_pace.engine.calculator import ProgressResult, compute_kr_progress
from okr_pace.engine.interpolation import expected_progress, expected_value
from okr_pace.engine.pace import classify_pace, worst_pace
from okr_pace.engine.quarterly import QuarterSummary, compute_quarterly_breakdown
from okr_pace.engine.rollups import compute_objective_progress, compute_plan_progress, rollup_plan
from okr_pace.engine.series import build_daily_series, build_weekly_series

__all__ = [
    "AnalyticsSummary",
    "ProgressResult",
    "QuarterSummary",
    "aggregate_analytics",
    "build_burnup",
    "build_daily_series",
    "build_weekly_series",
    "classify_pace",
    "compute_kr_progress",
    "compute_objective_progress",
    "compute_plan_progress",
    "compute_quarterly_breakdown",
    "expected_progress",
    "expected_value",
    "rollup_plan",
    "worst_pace",
]
