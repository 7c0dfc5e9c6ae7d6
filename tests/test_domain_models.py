"""
Tests for domain models.
"""

from datetime import date

import pytest

from cronos.domain.exceptions import InvalidScheduleError
from cronos.domain.intervals import TimeInterval
from cronos.domain.models import (
    Appointment,
    AppointmentStatus,
    DateException,
    Professional,
    Slot,
    WeeklyRule,
)


def _interval(start: str, end: str) -> TimeInterval:
    return TimeInterval.parse(start, end)


class TestWeeklyRule:
    """Tests for WeeklyRule invariants."""

    def test_valid_rule_with_break(self):
        """A break inside the working interval is accepted."""
        rule = WeeklyRule(
            day_of_week=1,
            active=True,
            intervals=(_interval("09:00", "18:00"),),
            breaks=(_interval("12:00", "13:00"),),
        )

        assert rule.breaks[0].start == 720

    def test_overlapping_intervals_raise(self):
        """Overlapping sub-intervals are malformed configuration."""
        with pytest.raises(InvalidScheduleError, match="non-overlapping"):
            WeeklyRule(
                day_of_week=1,
                active=True,
                intervals=(_interval("09:00", "13:00"), _interval("12:00", "18:00")),
            )

    def test_unordered_intervals_raise(self):
        """Intervals must be listed in ascending order."""
        with pytest.raises(InvalidScheduleError):
            WeeklyRule(
                day_of_week=1,
                active=True,
                intervals=(_interval("14:00", "18:00"), _interval("08:00", "12:00")),
            )

    def test_break_outside_working_hours_raises(self):
        """A rule's break must lie inside one of its working intervals."""
        with pytest.raises(InvalidScheduleError, match="outside the working hours"):
            WeeklyRule(
                day_of_week=1,
                active=True,
                intervals=(_interval("09:00", "12:00"),),
                breaks=(_interval("11:30", "12:30"),),
            )

    def test_active_rule_without_hours_raises(self):
        """An active rule needs at least one working interval."""
        with pytest.raises(InvalidScheduleError):
            WeeklyRule(day_of_week=2, active=True)

    def test_inactive_rule_without_hours(self):
        """An inactive rule needs no hours."""
        assert not WeeklyRule(day_of_week=0, active=False).active

    def test_invalid_weekday_raises(self):
        """Weekdays range from 0 (Sunday) to 6 (Saturday)."""
        with pytest.raises(InvalidScheduleError):
            WeeklyRule(day_of_week=7, active=False)


class TestProfessional:
    """Tests for Professional invariants and lookups."""

    def test_duplicate_weekday_rules_raise(self):
        """At most one rule per weekday."""
        rule = WeeklyRule(day_of_week=1, active=True, intervals=(_interval("09:00", "18:00"),))

        with pytest.raises(InvalidScheduleError, match="same weekday"):
            Professional(id="p1", tenant_id="t1", name="Carlos", weekly_rules=(rule, rule))

    def test_duplicate_exception_dates_raise(self):
        """At most one exception per date."""
        off = DateException(date=date(2024, 11, 25), active=False)

        with pytest.raises(InvalidScheduleError, match="same date"):
            Professional(id="p1", tenant_id="t1", name="Carlos", exceptions=(off, off))

    def test_non_positive_slot_interval_raises(self):
        """The booking granularity must be positive."""
        with pytest.raises(InvalidScheduleError):
            Professional(id="p1", tenant_id="t1", name="Carlos", slot_interval=0)

    def test_rule_and_exception_lookup(self):
        """Rules are found by weekday and exceptions by date."""
        rule = WeeklyRule(day_of_week=1, active=True, intervals=(_interval("09:00", "18:00"),))
        off = DateException(date=date(2024, 11, 25), active=False)
        professional = Professional(
            id="p1", tenant_id="t1", name="Carlos",
            weekly_rules=(rule,), exceptions=(off,),
        )

        assert professional.rule_for(1) is rule
        assert professional.rule_for(2) is None
        assert professional.exception_for(date(2024, 11, 25)) is off
        assert professional.exception_for(date(2024, 11, 26)) is None


class TestAppointment:
    """Tests for Appointment conflict detection."""

    def _appointment(self, status: AppointmentStatus) -> Appointment:
        return Appointment(
            id="a1",
            tenant_id="t1",
            professional_id="p1",
            date=date(2024, 11, 25),
            interval=_interval("10:00", "11:00"),
            status=status,
        )

    @pytest.mark.parametrize("status", [
        AppointmentStatus.PENDING,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.COMPLETED,
    ])
    def test_active_statuses_block_time(self, status):
        """Every status except CANCELLED blocks overlapping intervals."""
        appointment = self._appointment(status)

        assert appointment.conflicts_with(_interval("10:30", "11:30"))
        assert not appointment.conflicts_with(_interval("11:00", "12:00"))

    def test_cancelled_never_conflicts(self):
        """Cancelled appointments are ignored entirely."""
        appointment = self._appointment(AppointmentStatus.CANCELLED)

        assert not appointment.conflicts_with(_interval("10:00", "11:00"))

    def test_time_labels(self):
        """Start and end render as HH:MM."""
        appointment = self._appointment(AppointmentStatus.PENDING)

        assert appointment.start_time == "10:00"
        assert appointment.end_time == "11:00"


def test_slot_display():
    """Slots render their start and length."""
    slot = Slot(start=540, end=585)

    assert str(slot) == "09:00"
    assert slot.format_display() == "09:00 - 09:45 (45 min)"
    assert slot.interval == _interval("09:00", "09:45")
