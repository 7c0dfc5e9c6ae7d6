"""
Tests for slot generation.
"""

from cronos.domain.intervals import TimeInterval, format_time
from cronos.domain.models import AppointmentStatus, DateException, WeeklyRule

from .factories import MONDAY, TUESDAY, day_off, make_appointment, make_professional


def _starts(slots):
    return [format_time(slot.start) for slot in slots]


class TestSlotGenerator:
    """Tests for SlotGenerator."""

    def test_full_day_with_break(self, generator):
        """Hourly slots skip the break; the slot ending at break start is kept."""
        slots = generator.generate(make_professional(), MONDAY, [])

        assert _starts(slots) == [
            "09:00", "10:00", "11:00",
            "13:00", "14:00", "15:00", "16:00", "17:00",
        ]

    def test_day_off_exception_yields_nothing(self, generator):
        """An inactive exception empties the day regardless of the weekly rule."""
        assert generator.generate(make_professional(exceptions=[day_off()]), MONDAY, []) == []

    def test_weekend_yields_nothing(self, generator):
        """Inactive weekly rules produce no slots."""
        assert generator.generate(make_professional(), MONDAY.replace(day=24), []) == []

    def test_booked_slot_is_excluded(self, generator):
        """A confirmed appointment removes the overlapping slot."""
        booked = make_appointment("10:00", "11:00")

        slots = generator.generate(make_professional(), MONDAY, [booked])

        assert "10:00" not in _starts(slots)
        assert "09:00" in _starts(slots)
        assert "11:00" in _starts(slots)

    def test_partial_overlap_excludes_both_neighbours(self, generator):
        """An appointment straddling two slots blocks both."""
        booked = make_appointment("10:30", "11:15")

        slots = generator.generate(make_professional(), MONDAY, [booked])

        assert _starts(slots)[:2] == ["09:00", "13:00"]

    def test_cancelled_appointment_is_ignored(self, generator):
        """Cancelled appointments free their time."""
        cancelled = make_appointment("14:00", "15:00", status=AppointmentStatus.CANCELLED)

        slots = generator.generate(make_professional(), MONDAY, [cancelled])

        assert "14:00" in _starts(slots)

    def test_other_professionals_and_dates_are_ignored(self, generator):
        """Only the professional's own appointments on that date count."""
        appointments = [
            make_appointment("09:00", "10:00", professional_id="p2"),
            make_appointment("10:00", "11:00", day=TUESDAY),
        ]

        slots = generator.generate(make_professional(), MONDAY, appointments)

        assert _starts(slots)[:3] == ["09:00", "10:00", "11:00"]

    def test_slot_that_does_not_fit_is_discarded(self, generator):
        """With 45-minute slots the tail shorter than a slot is dropped, not truncated."""
        professional = make_professional(slot_interval=45, rules=(
            WeeklyRule(day_of_week=1, active=True, intervals=(TimeInterval.parse("09:00", "11:00"),)),
        ))

        slots = generator.generate(professional, MONDAY, [])

        assert _starts(slots) == ["09:00", "09:45"]
        assert format_time(slots[-1].end) == "10:30"

    def test_uneven_interval_around_break(self, generator):
        """Slots crossing into the break are skipped, stepping continues on the grid."""
        slots = generator.generate(make_professional(slot_interval=45), MONDAY, [])

        assert _starts(slots) == [
            "09:00", "09:45", "10:30", "11:15",
            "13:30", "14:15", "15:00", "15:45", "16:30", "17:15",
        ]

    def test_split_day_intervals_in_order(self, generator):
        """Morning and afternoon intervals are processed independently and concatenated."""
        professional = make_professional(rules=(
            WeeklyRule(
                day_of_week=1,
                active=True,
                intervals=(
                    TimeInterval.parse("08:00", "10:30"),
                    TimeInterval.parse("14:00", "16:00"),
                ),
            ),
        ))

        slots = generator.generate(professional, MONDAY, [])

        assert _starts(slots) == ["08:00", "09:00", "14:00", "15:00"]

    def test_multiple_breaks(self, generator):
        """Every break is excluded."""
        professional = make_professional(rules=(
            WeeklyRule(
                day_of_week=1,
                active=True,
                intervals=(TimeInterval.parse("09:00", "14:00"),),
                breaks=(
                    TimeInterval.parse("10:00", "10:15"),
                    TimeInterval.parse("12:00", "13:00"),
                ),
            ),
        ))

        slots = generator.generate(professional, MONDAY, [])

        assert _starts(slots) == ["09:00", "11:00", "13:00"]

    def test_service_duration_longer_than_grid(self, generator):
        """Longer candidates start on the slot grid and must fit around breaks."""
        slots = generator.generate(make_professional(), MONDAY, [], duration_minutes=90)

        assert _starts(slots) == ["09:00", "10:00", "13:00", "14:00", "15:00", "16:00"]
        assert slots[0].end - slots[0].start == 90

    def test_slots_never_cross_midnight(self, generator):
        """A slot that would run past the end of the day is dropped."""
        professional = make_professional(slot_interval=90, rules=(
            WeeklyRule(day_of_week=1, active=True, intervals=(TimeInterval.parse("22:00", "24:00"),)),
        ))

        assert _starts(generator.generate(professional, MONDAY, [])) == ["22:00"]

    def test_exception_hours_replace_weekly_hours(self, generator):
        """Active exception hours are used without the weekly break."""
        extra = DateException(
            date=MONDAY,
            active=True,
            intervals=(TimeInterval.parse("11:00", "14:00"),),
        )

        slots = generator.generate(make_professional(exceptions=[extra]), MONDAY, [])

        assert _starts(slots) == ["11:00", "12:00", "13:00"]


class TestSlotProperties:
    """Structural guarantees of generated slots."""

    def test_slots_strictly_increasing_and_disjoint(self, generator):
        """Slots never overlap each other."""
        appointments = [make_appointment("10:20", "10:50")]
        slots = generator.generate(make_professional(slot_interval=25), MONDAY, appointments)

        for previous, current in zip(slots, slots[1:]):
            assert previous.start < current.start
            assert previous.end <= current.start

    def test_slots_avoid_breaks_and_bookings(self, generator):
        """No slot overlaps the break or an active booking."""
        booked = make_appointment("15:00", "16:30")
        professional = make_professional(slot_interval=30)

        for slot in generator.generate(professional, MONDAY, [booked]):
            assert not slot.interval.overlaps(TimeInterval.parse("12:00", "13:00"))
            assert not slot.interval.overlaps(booked.interval)

    def test_generate_is_idempotent(self, generator):
        """Identical inputs produce identical outputs."""
        professional = make_professional()
        appointments = [make_appointment("10:00", "11:00")]

        assert generator.generate(professional, MONDAY, appointments) == \
            generator.generate(professional, MONDAY, appointments)
