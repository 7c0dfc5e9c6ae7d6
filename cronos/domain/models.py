"""
Domain models for professionals, availability and appointments.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from .exceptions import InvalidScheduleError
from .intervals import TimeInterval, contains, ensure_ordered, format_time


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def blocks_time(self) -> bool:
        """Every status except CANCELLED occupies the professional's time."""
        return self is not AppointmentStatus.CANCELLED


class DaySource(str, Enum):
    """Where a resolved day's hours came from."""
    EXCEPTION = "exception"
    WEEKLY_RULE = "weekly_rule"


@dataclass(frozen=True)
class WeeklyRule:
    """
    Recurring availability for one day of the week.

    Invariant: working intervals are ordered and non-overlapping, and every
    break lies inside one working interval.
    """
    day_of_week: int  # 0=Sunday, 6=Saturday
    active: bool
    intervals: Tuple[TimeInterval, ...] = ()
    breaks: Tuple[TimeInterval, ...] = ()

    def __post_init__(self):
        if self.day_of_week not in range(7):
            raise InvalidScheduleError(
                f"day_of_week must be between 0 and 6, got {self.day_of_week}"
            )
        if self.active and not self.intervals:
            raise InvalidScheduleError(
                f"Active rule for day {self.day_of_week} has no working interval"
            )

        ensure_ordered(self.intervals, "Working")
        ensure_ordered(self.breaks, "Break")

        if not self.active:
            return

        for break_interval in self.breaks:
            if not any(contains(work, break_interval) for work in self.intervals):
                raise InvalidScheduleError(
                    f"Break {break_interval} lies outside the working hours "
                    f"of day {self.day_of_week}"
                )


@dataclass(frozen=True)
class DateException:
    """
    Date-specific override that fully replaces the weekly rule for its date.

    An active exception without intervals falls back to the configured
    default window.
    """
    date: date
    active: bool
    intervals: Tuple[TimeInterval, ...] = ()
    breaks: Tuple[TimeInterval, ...] = ()
    reason: str = ""

    def __post_init__(self):
        ensure_ordered(self.intervals, "Working")
        ensure_ordered(self.breaks, "Break")


@dataclass(frozen=True)
class Professional:
    """A bookable staff member together with their availability pattern."""
    id: str
    tenant_id: str
    name: str
    slot_interval: int = 60
    weekly_rules: Tuple[WeeklyRule, ...] = ()
    exceptions: Tuple[DateException, ...] = ()
    email: str = ""
    specialty: str = ""

    def __post_init__(self):
        if self.slot_interval <= 0:
            raise InvalidScheduleError(
                f"slot_interval must be greater than zero, got {self.slot_interval}"
            )

        weekdays = [rule.day_of_week for rule in self.weekly_rules]
        if len(weekdays) != len(set(weekdays)):
            raise InvalidScheduleError(
                f"Professional {self.id} has more than one rule for the same weekday"
            )

        dates = [exception.date for exception in self.exceptions]
        if len(dates) != len(set(dates)):
            raise InvalidScheduleError(
                f"Professional {self.id} has more than one exception for the same date"
            )

    def rule_for(self, weekday: int) -> WeeklyRule | None:
        for rule in self.weekly_rules:
            if rule.day_of_week == weekday:
                return rule
        return None

    def exception_for(self, day: date) -> DateException | None:
        for exception in self.exceptions:
            if exception.date == day:
                return exception
        return None


@dataclass(frozen=True)
class Service:
    """A bookable service; its duration sets the length of an appointment."""
    id: str
    tenant_id: str
    name: str
    duration_minutes: int
    price: float = 0.0

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise InvalidScheduleError(
                f"Service {self.id} duration must be greater than zero"
            )


@dataclass(frozen=True)
class Appointment:
    """A booked time interval for a professional on a given date."""
    id: str
    tenant_id: str
    professional_id: str
    date: date
    interval: TimeInterval
    status: AppointmentStatus = AppointmentStatus.PENDING
    client_id: str = ""
    service_id: str = ""
    notes: str = ""

    @property
    def start_time(self) -> str:
        return format_time(self.interval.start)

    @property
    def end_time(self) -> str:
        return format_time(self.interval.end)

    def conflicts_with(self, candidate: TimeInterval) -> bool:
        """Check if this appointment blocks the candidate interval."""
        return self.status.blocks_time and self.interval.overlaps(candidate)


@dataclass(frozen=True)
class ResolvedDay:
    """
    Effective working hours of a professional on one date.

    Built either from a date exception or from the weekly rule, never from a
    mix of both.
    """
    source: DaySource
    intervals: Tuple[TimeInterval, ...]
    breaks: Tuple[TimeInterval, ...] = ()

    def working_interval_for(self, candidate: TimeInterval) -> Optional[TimeInterval]:
        """Return the working interval that fully contains the candidate."""
        for interval in self.intervals:
            if interval.contains(candidate):
                return interval
        return None

    def overlaps_break(self, candidate: TimeInterval) -> bool:
        return any(candidate.overlaps(break_interval) for break_interval in self.breaks)


@dataclass(frozen=True, order=True)
class Slot:
    """A bookable interval produced by the slot generator."""
    start: int
    end: int

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start, end=self.end)

    def __str__(self) -> str:
        return format_time(self.start)

    def format_display(self) -> str:
        """Format the slot for display: HH:MM - HH:MM (N min)."""
        return f"{format_time(self.start)} - {format_time(self.end)} ({self.end - self.start} min)"


@dataclass(frozen=True)
class TenantContext:
    """Identity of the caller, passed explicitly into every store call."""
    tenant_id: str
    actor_id: str = ""
