"""Calendar period helpers: year and quarter windows, ISO weeks, elapsed fractions.

All datetimes are naive UTC. Windows are inclusive of their last calendar day:
a year runs from Jan 1 00:00 to the last instant of Dec 31, and a quarter ends
at the last instant of its last day, the same instant a bare date resolves to.
Q4 ends exactly at the year end.
"""

from datetime import date, datetime, time, timedelta

QUARTERS = (1, 2, 3, 4)


def end_of_day(d: date) -> datetime:
    """Last representable instant of a calendar day."""
    return datetime.combine(d, time.max)


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Get the start and end instants of a plan year.

    Args:
        year: Calendar year.

    Returns:
        Tuple of (Jan 1 00:00, last instant of Dec 31).
    """
    return datetime(year, 1, 1), end_of_day(date(year, 12, 31))


def quarter_bounds(year: int, quarter: int) -> tuple[datetime, datetime]:
    """Get the start and end instants of a quarter.

    Args:
        year: Calendar year.
        quarter: Quarter number 1-4.

    Returns:
        Tuple of (first day 00:00, last instant of the last day).

    Raises:
        ValueError: If quarter is not 1-4.
    """
    if quarter not in QUARTERS:
        msg = f"quarter must be 1-4, got {quarter}"
        raise ValueError(msg)

    first_month = (quarter - 1) * 3 + 1
    start = datetime(year, first_month, 1)
    next_start = datetime(year + 1, 1, 1) if quarter == 4 else datetime(year, first_month + 3, 1)
    return start, end_of_day(next_start.date() - timedelta(days=1))


def quarter_of(moment: date) -> int:
    """Get the quarter (1-4) a date or datetime falls in."""
    return (moment.month - 1) // 3 + 1


def elapsed_fraction(as_of: datetime, start: datetime, end: datetime) -> float:
    """Fraction of the window [start, end] elapsed at as_of, clamped to [0, 1].

    A zero-length or inverted window counts as fully elapsed.
    """
    total = (end - start).total_seconds()
    if total <= 0:
        return 1.0
    elapsed = (as_of - start).total_seconds() / total
    return min(1.0, max(0.0, elapsed))


def week_start(d: date) -> date:
    """Get the start date of the ISO week (Monday) for a given date."""
    return d - timedelta(days=d.isoweekday() - 1)


def week_end(d: date) -> date:
    """Get the end date of the ISO week (Sunday) for a given date."""
    return week_start(d) + timedelta(days=6)
