"""Tests for period helpers and the value interpolator."""

from datetime import date, datetime, time, timedelta

import pytest

from okr_pace.engine.interpolation import (
    expected_progress,
    expected_value,
    quarter_target_map,
)
from okr_pace.engine.periods import (
    elapsed_fraction,
    quarter_bounds,
    quarter_of,
    week_end,
    week_start,
    year_bounds,
)
from okr_pace.models import KeyResult, KrAggregation, KrDirection, QuarterTarget


def _eod(d: date) -> datetime:
    return datetime.combine(d, time.max)


class TestPeriods:
    """Tests for calendar period helpers."""

    def test_year_bounds(self) -> None:
        """Test that a year runs from Jan 1 to the end of Dec 31."""
        assert year_bounds(2026) == (datetime(2026, 1, 1), _eod(date(2026, 12, 31)))

    @pytest.mark.parametrize(
        ("quarter", "start", "end"),
        [
            (1, datetime(2026, 1, 1), _eod(date(2026, 3, 31))),
            (2, datetime(2026, 4, 1), _eod(date(2026, 6, 30))),
            (3, datetime(2026, 7, 1), _eod(date(2026, 9, 30))),
            (4, datetime(2026, 10, 1), _eod(date(2026, 12, 31))),
        ],
    )
    def test_quarter_bounds(self, quarter: int, start: datetime, end: datetime) -> None:
        """Test that quarters start at midnight and end with their last day."""
        assert quarter_bounds(2026, quarter) == (start, end)

    def test_quarter_bounds_invalid(self) -> None:
        """Test that quarter numbers outside 1-4 raise."""
        with pytest.raises(ValueError, match="quarter must be 1-4"):
            quarter_bounds(2026, 0)

    def test_quarter_of(self) -> None:
        """Test mapping dates to quarters."""
        assert quarter_of(date(2026, 1, 15)) == 1
        assert quarter_of(date(2026, 6, 30)) == 2
        assert quarter_of(datetime(2026, 10, 1)) == 4

    def test_elapsed_fraction_clamped(self) -> None:
        """Test clamping before the start and after the end."""
        start, end = datetime(2026, 1, 1), datetime(2026, 1, 11)
        assert elapsed_fraction(datetime(2025, 12, 1), start, end) == 0.0
        assert elapsed_fraction(datetime(2026, 1, 6), start, end) == 0.5
        assert elapsed_fraction(datetime(2026, 2, 1), start, end) == 1.0

    def test_elapsed_fraction_zero_window(self) -> None:
        """Test that an empty window counts as fully elapsed."""
        moment = datetime(2026, 1, 1)
        assert elapsed_fraction(moment, moment, moment) == 1.0

    def test_iso_week(self) -> None:
        """Test Monday-to-Sunday week bounds."""
        # 2026-01-01 is a Thursday
        assert week_start(date(2026, 1, 1)) == date(2025, 12, 29)
        assert week_end(date(2026, 1, 1)) == date(2026, 1, 4)
        assert week_start(date(2026, 1, 5)) == date(2026, 1, 5)


class TestLinearInterpolation:
    """Tests for the straight annual pacing line."""

    def test_midpoint(self, revenue_kr: KeyResult) -> None:
        """Test that the exact middle of the year expects half the range."""
        start, end = year_bounds(2026)
        midpoint = start + (end - start) / 2
        assert expected_value(revenue_kr, midpoint) == pytest.approx(500)
        assert expected_progress(revenue_kr, midpoint) == pytest.approx(0.5)

    def test_before_year_start(self, revenue_kr: KeyResult) -> None:
        """Test that dates before the year expect the start value."""
        assert expected_value(revenue_kr, datetime(2025, 11, 1)) == 0

    def test_after_year_end(self, revenue_kr: KeyResult) -> None:
        """Test that dates after the year expect the target value."""
        assert expected_value(revenue_kr, datetime(2027, 2, 1)) == 1000

    def test_explicit_year_overrides_kr_year(self, revenue_kr: KeyResult) -> None:
        """Test that the year argument replaces the KR's own year."""
        assert expected_value(revenue_kr, datetime(2026, 6, 1), year=2027) == 0

    def test_decreasing_kr(self) -> None:
        """Test interpolation when the target is below the start."""
        kr = KeyResult(id="churn", start_value=10, target_value=4, year=2026)
        start, end = year_bounds(2026)
        assert expected_value(kr, start + (end - start) / 2) == pytest.approx(7)


class TestQuarterTargetInterpolation:
    """Tests for piecewise interpolation through quarter targets."""

    def test_knot_values(
        self, revenue_kr: KeyResult, revenue_quarter_targets: list[QuarterTarget]
    ) -> None:
        """Test that quarter ends hit the explicit targets."""
        assert expected_value(
            revenue_kr, date(2026, 3, 31), quarter_targets=revenue_quarter_targets
        ) == pytest.approx(100)
        assert expected_value(
            revenue_kr, date(2026, 6, 30), quarter_targets=revenue_quarter_targets
        ) == pytest.approx(300)

    def test_between_targets(
        self, revenue_kr: KeyResult, revenue_quarter_targets: list[QuarterTarget]
    ) -> None:
        """Test linear interpolation between two explicit targets."""
        (_, q1_end), (_, q2_end) = quarter_bounds(2026, 1), quarter_bounds(2026, 2)
        midpoint = q1_end + (q2_end - q1_end) / 2
        assert expected_value(
            revenue_kr, midpoint, quarter_targets=revenue_quarter_targets
        ) == pytest.approx(200)

    def test_quarter_without_target_uses_annual_knot(
        self, revenue_kr: KeyResult, revenue_quarter_targets: list[QuarterTarget]
    ) -> None:
        """Test that untargeted quarter ends fall back to the annual line."""
        q3_end = date(2026, 9, 30)
        annual = expected_value(revenue_kr, q3_end)
        assert expected_value(
            revenue_kr, q3_end, quarter_targets=revenue_quarter_targets
        ) == pytest.approx(annual)
        assert expected_value(
            revenue_kr, date(2026, 12, 31), quarter_targets=revenue_quarter_targets
        ) == pytest.approx(1000)

    def test_first_segment_starts_at_start_value(
        self, revenue_kr: KeyResult, revenue_quarter_targets: list[QuarterTarget]
    ) -> None:
        """Test the segment from Jan 1 to the Q1 target."""
        q1_start, q1_end = quarter_bounds(2026, 1)
        midpoint = q1_start + (q1_end - q1_start) / 2
        assert expected_value(
            revenue_kr, midpoint, quarter_targets=revenue_quarter_targets
        ) == pytest.approx(50)

    def test_targets_of_other_krs_ignored(self, revenue_kr: KeyResult) -> None:
        """Test that quarter targets for another KR have no effect."""
        other = [QuarterTarget(kr_id="other", quarter=1, target_value=900)]
        moment = datetime(2026, 3, 31)
        assert expected_value(revenue_kr, moment, quarter_targets=other) == expected_value(
            revenue_kr, moment
        )
        assert quarter_target_map(revenue_kr, other) == {}


class TestMilestoneInterpolation:
    """Tests for binary milestone expectations."""

    def test_before_due(self, launch_kr: KeyResult) -> None:
        """Test that milestones expect nothing before their due day."""
        assert expected_value(launch_kr, date(2026, 6, 29)) == 0.0
        assert expected_value(launch_kr, datetime(2026, 6, 29, 23, 59)) == 0.0

    def test_due_day_expects_completion(self, launch_kr: KeyResult) -> None:
        """Test that the whole due day already expects completion."""
        assert expected_value(launch_kr, datetime(2026, 6, 30)) == 1.0
        assert expected_value(launch_kr, datetime(2026, 6, 30, 12)) == 1.0
        assert expected_value(launch_kr, date(2026, 6, 30)) == 1.0

    def test_after_due(self, launch_kr: KeyResult) -> None:
        """Test that milestones expect completion once the due date has passed."""
        assert expected_value(launch_kr, date(2026, 7, 1)) == 1.0
        assert expected_progress(launch_kr, date(2026, 7, 1)) == 1.0

    def test_default_due_is_year_end(self) -> None:
        """Test that milestones without a due date are due on Dec 31."""
        kr = KeyResult(id="ms", kr_type="milestone", year=2026)
        assert expected_value(kr, datetime(2026, 12, 30, 12)) == 0.0
        assert expected_value(kr, datetime(2026, 12, 31, 12)) == 1.0
        assert expected_value(kr, year_bounds(2026)[1]) == 1.0
        assert expected_value(kr, datetime(2026, 12, 31) + timedelta(days=1)) == 1.0


class TestDegenerateInterpolation:
    """Tests for KRs whose target equals their start."""

    def test_expected_progress_zero(self) -> None:
        """Test that a degenerate KR has no expected progress."""
        kr = KeyResult(id="flat", start_value=50, target_value=50, year=2026)
        assert expected_value(kr, datetime(2026, 7, 1)) == 50
        assert expected_progress(kr, datetime(2026, 7, 1)) == 0.0


class TestMaintainInterpolation:
    """Tests for KRs meant to hold their value."""

    def test_expects_target_all_year(self) -> None:
        """Test that a maintain KR expects its target from Jan 1 on."""
        kr = KeyResult(
            id="nps",
            start_value=40,
            target_value=50,
            direction=KrDirection.MAINTAIN,
            aggregation=KrAggregation.CUMULATIVE,
            year=2026,
        )
        for moment in (datetime(2026, 1, 1), datetime(2026, 7, 1), date(2026, 12, 31)):
            assert expected_value(kr, moment) == 50
            assert expected_progress(kr, moment) == 1.0
