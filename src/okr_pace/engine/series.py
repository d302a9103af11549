"""Daily and weekly progress series for a single key result.

Schema (daily series):
    - date (date): Calendar day
    - current_value (float): KR value at the end of the day
    - progress (float): Unclamped progress fraction
    - expected_value (float): Expected value at the end of the day
    - expected_progress (float): Expected progress fraction
    - pace_status (string): on_track, at_risk or off_track
    - check_in_count (int64): Check-ins recorded that day

The weekly series groups daily rows by ISO week (Monday start), keeping the
last day's values and summing check-in counts. Its date column holds the week
start.
"""

import logging
from collections.abc import Iterable
from typing import Any

import pandas as pd

from okr_pace.config import PaceThresholds
from okr_pace.engine.calculator import RunningValue, check_ins_for, progress_fraction
from okr_pace.engine.interpolation import expected_progress, expected_value
from okr_pace.engine.pace import classify_pace
from okr_pace.engine.periods import end_of_day, week_start
from okr_pace.models import CheckIn, DateRange, KeyResult, QuarterTarget

logger = logging.getLogger(__name__)

SERIES_COLUMNS = [
    "date",
    "current_value",
    "progress",
    "expected_value",
    "expected_progress",
    "pace_status",
    "check_in_count",
]


def build_daily_series(
    kr: KeyResult,
    check_ins: Iterable[CheckIn],
    date_range: DateRange,
    quarter_targets: Iterable[QuarterTarget] = (),
    thresholds: PaceThresholds | None = None,
) -> pd.DataFrame:
    """Build one row per day of the range tracking a KR's value and pace.

    Check-ins before the range seed the running value, so the first row
    reflects history already recorded.

    Args:
        kr: Key result.
        check_ins: Check-ins, possibly for several KRs.
        date_range: Days to emit.
        quarter_targets: Quarter targets, possibly for several KRs.
        thresholds: Pace classification floors.

    Returns:
        DataFrame with the daily series schema, sorted by date.
    """
    quarter_targets = list(quarter_targets)
    history = check_ins_for(kr, check_ins, until=date_range.end_moment)

    running = RunningValue(kr)
    cursor = 0
    records: list[dict[str, Any]] = []

    for day in date_range.dates():
        day_end = end_of_day(day)
        day_count = 0
        while cursor < len(history) and history[cursor].recorded_at <= day_end:
            ci = history[cursor]
            running.add(ci)
            if ci.recorded_at.date() == day:
                day_count += 1
            cursor += 1

        value = running.value
        progress = progress_fraction(kr, value)
        expected_fraction = expected_progress(kr, day_end, None, quarter_targets)
        records.append(
            {
                "date": day,
                "current_value": value,
                "progress": progress,
                "expected_value": expected_value(kr, day_end, None, quarter_targets),
                "expected_progress": expected_fraction,
                "pace_status": classify_pace(progress, expected_fraction, thresholds).value,
                "check_in_count": day_count,
            }
        )

    logger.debug("Built %d daily series rows for KR %s", len(records), kr.id)
    return pd.DataFrame(records, columns=SERIES_COLUMNS)


def build_weekly_series(daily: pd.DataFrame) -> pd.DataFrame:
    """Aggregate a daily series into ISO weeks.

    Args:
        daily: DataFrame from build_daily_series.

    Returns:
        DataFrame with the same columns, one row per week, date = week start.
    """
    if daily.empty:
        return _empty_series_df()

    df = daily.sort_values("date").copy()
    df["_week_start"] = df["date"].apply(week_start)

    weekly = (
        df.groupby("_week_start", sort=True)
        .agg(
            current_value=("current_value", "last"),
            progress=("progress", "last"),
            expected_value=("expected_value", "last"),
            expected_progress=("expected_progress", "last"),
            pace_status=("pace_status", "last"),
            check_in_count=("check_in_count", "sum"),
        )
        .reset_index()
        .rename(columns={"_week_start": "date"})
    )
    weekly["check_in_count"] = weekly["check_in_count"].astype("int64")
    return weekly[SERIES_COLUMNS]


def _empty_series_df() -> pd.DataFrame:
    """Create empty DataFrame with the series schema."""
    return pd.DataFrame(columns=SERIES_COLUMNS)
