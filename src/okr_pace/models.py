"""Typed input records for the progress engine.

Records arriving from the data-fetch layer are validated here once, so the
engine functions can rely on their shape. Datetimes are normalized to naive
UTC: aware values are converted, naive values are taken to already be UTC.
"""

from datetime import UTC, date, datetime, time, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class KrType(str, Enum):
    """Semantic type of a key result.

    Determines how check-ins fold into the current value: metric and rate take
    the latest value, count sums the values, average takes their mean, and a
    milestone is complete once any check-in recorded a truthy value.
    """

    METRIC = "metric"
    COUNT = "count"
    MILESTONE = "milestone"
    RATE = "rate"
    AVERAGE = "average"


class KrDirection(str, Enum):
    """Which way a key result's value is meant to move."""

    INCREASE = "increase"
    DECREASE = "decrease"
    MAINTAIN = "maintain"


class KrAggregation(str, Enum):
    """Check-in window used for quarterly actuals."""

    RESET_QUARTERLY = "reset_quarterly"
    CUMULATIVE = "cumulative"


class PaceStatus(str, Enum):
    """Pace classification of actual versus expected progress."""

    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    OFF_TRACK = "off_track"


def to_naive_utc(value: datetime) -> datetime:
    """Convert a datetime to naive UTC.

    Args:
        value: Naive (assumed UTC) or timezone-aware datetime.

    Returns:
        Naive datetime in UTC.
    """
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def as_moment(value: date | datetime | None) -> datetime:
    """Coerce an evaluation time to a naive UTC datetime.

    A bare date means the end of that day, so check-ins recorded on it count.
    None means now.
    """
    if value is None:
        return datetime.now(UTC).replace(tzinfo=None)
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return datetime.combine(value, time.max)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class KeyResult(_Record):
    """A measurable sub-goal of an objective."""

    id: str
    objective_id: str | None = None
    name: str | None = None
    kr_type: KrType = KrType.METRIC
    direction: KrDirection = KrDirection.INCREASE
    aggregation: KrAggregation = KrAggregation.CUMULATIVE
    start_value: float = 0.0
    target_value: float = 1.0
    unit: str | None = None
    year: int = Field(ge=1970, le=9999)
    # Rollups count non-positive weights as 1
    weight: float = 1.0
    due_date: date | None = None
    tolerance_band: float | None = Field(default=None, gt=0)

    @property
    def value_range(self) -> float:
        """Distance from start to target."""
        return self.target_value - self.start_value

    @property
    def is_maintain(self) -> bool:
        """True for a numeric KR meant to hold its value at the target."""
        return self.kr_type is not KrType.MILESTONE and self.direction is KrDirection.MAINTAIN

    @property
    def tolerance(self) -> float:
        """Allowed deviation from the target for a maintain KR.

        Defaults to 5% of the target, with a floor of 0.5.
        """
        if self.tolerance_band is not None:
            return self.tolerance_band
        return max(abs(self.target_value) * 0.05, 0.5)

    @property
    def is_degenerate(self) -> bool:
        """True for a numeric KR that has to move but whose target equals its start."""
        return (
            self.kr_type is not KrType.MILESTONE
            and not self.is_maintain
            and self.value_range == 0
        )


class CheckIn(_Record):
    """A timestamped value recorded against a key result."""

    id: str | None = None
    kr_id: str
    value: float
    recorded_at: datetime
    previous_value: float | None = None

    @field_validator("recorded_at")
    @classmethod
    def normalize_recorded_at(cls, v: datetime) -> datetime:
        """Store timestamps as naive UTC."""
        return to_naive_utc(v)

    @property
    def delta(self) -> float | None:
        """Change against the previous value snapshot, if one was captured."""
        if self.previous_value is None:
            return None
        return self.value - self.previous_value


class QuarterTarget(_Record):
    """Expected KR value at the end of one quarter of its year."""

    id: str | None = None
    kr_id: str
    quarter: int = Field(ge=1, le=4)
    target_value: float


class Task(_Record):
    """A unit of work, optionally linked to a key result."""

    id: str
    status: str = "todo"
    created_at: datetime | None = None
    completed_at: datetime | None = None
    due_date: date | None = None
    kr_id: str | None = None

    @field_validator("created_at", "completed_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime | None) -> datetime | None:
        """Store timestamps as naive UTC."""
        return to_naive_utc(v) if v is not None else None

    @property
    def is_completed(self) -> bool:
        """True when the task is done and its completion time is known."""
        return self.status == "completed" and self.completed_at is not None

    @property
    def is_active(self) -> bool:
        """True while the task is neither completed nor cancelled."""
        return self.status not in ("completed", "cancelled")


class Objective(_Record):
    """An objective grouping key results."""

    id: str
    name: str | None = None
    weight: float = 1.0


class DateRange(_Record):
    """Inclusive calendar date range for a reporting period."""

    start: date
    end: date

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        """Validate that start is not after end."""
        if self.start > self.end:
            msg = f"start ({self.start.isoformat()}) must not be after end ({self.end.isoformat()})"
            raise ValueError(msg)
        return self

    @classmethod
    def for_year(cls, year: int) -> "DateRange":
        """Range covering a whole calendar year."""
        return cls(start=date(year, 1, 1), end=date(year, 12, 31))

    @property
    def days(self) -> int:
        """Number of calendar days in the range."""
        return (self.end - self.start).days + 1

    @property
    def start_moment(self) -> datetime:
        """Midnight at the start of the range."""
        return datetime.combine(self.start, time.min)

    @property
    def end_moment(self) -> datetime:
        """Last instant of the range's final day."""
        return datetime.combine(self.end, time.max)

    def contains(self, moment: datetime) -> bool:
        """Whether a naive UTC datetime falls inside the range."""
        return self.start <= moment.date() <= self.end

    def dates(self) -> list[date]:
        """Every calendar day in the range, ascending."""
        return [self.start + timedelta(days=offset) for offset in range(self.days)]
