"""
Interval arithmetic on time-of-day values.

Times are integers counting minutes since midnight, so every comparison is an
integer comparison. Intervals are half-open: ``[start, end)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import pendulum

from .exceptions import InvalidScheduleError

MINUTES_PER_DAY = 24 * 60


def parse_time(value: str | int) -> int:
    """
    Parse an ``HH:MM`` (24-hour) string into minutes since midnight.

    Integers are accepted as already-converted minute values. ``24:00`` is
    allowed so a working interval can run until the end of the day.

    Raises:
        InvalidScheduleError: If the value is not a valid time of day
    """
    if isinstance(value, bool):
        raise InvalidScheduleError(f"Invalid time value: {value!r}")

    if isinstance(value, int):
        minutes = value
    elif isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise InvalidScheduleError(f"Invalid time '{value}', expected HH:MM")
        hours, mins = int(parts[0]), int(parts[1])
        if hours > 24 or mins > 59:
            raise InvalidScheduleError(f"Invalid time '{value}', expected HH:MM")
        minutes = hours * 60 + mins
    else:
        raise InvalidScheduleError(f"Invalid time value: {value!r}")

    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise InvalidScheduleError(f"Time {value!r} is outside a single day")
    return minutes


def format_time(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value: str | date) -> date:
    """
    Parse a ``YYYY-MM-DD`` string into a date.

    Dates are tenant-local calendar days; no timezone conversion happens.

    Raises:
        InvalidScheduleError: If the value cannot be parsed
    """
    if isinstance(value, date):
        return value

    try:
        return pendulum.from_format(str(value).strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidScheduleError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def day_of_week(day: date) -> int:
    """Return the weekday with 0=Sunday ... 6=Saturday."""
    return day.isoweekday() % 7


def add_minutes(time_value: int, minutes: int) -> int:
    """Wall-clock addition; results past midnight are not wrapped."""
    return time_value + minutes


@dataclass(frozen=True, order=True)
class TimeInterval:
    """
    Immutable half-open time-of-day interval.

    Invariant: 0 <= start < end <= 1440.
    """
    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise InvalidScheduleError(
                f"Interval start {format_time(self.start)} must be before end "
                f"{format_time(self.end)} within a single day"
            )

    @classmethod
    def parse(cls, start: str | int, end: str | int) -> "TimeInterval":
        """Build an interval from two ``HH:MM`` strings (or minute values)."""
        return cls(start=parse_time(start), end=parse_time(end))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps another; touching ends do not."""
        return overlaps(self, other)

    def contains(self, other: "TimeInterval") -> bool:
        """Check if the other interval lies fully inside this one."""
        return contains(self, other)

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and b.start < a.end


def contains(outer: TimeInterval, inner: TimeInterval) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


def ensure_ordered(intervals: tuple[TimeInterval, ...], label: str) -> None:
    """
    Check that intervals are ascending and pairwise non-overlapping.

    Raises:
        InvalidScheduleError: If two intervals overlap or are out of order
    """
    for previous, current in zip(intervals, intervals[1:]):
        if current.start < previous.end:
            raise InvalidScheduleError(
                f"{label} intervals must be ordered and non-overlapping: "
                f"{previous} and {current}"
            )
