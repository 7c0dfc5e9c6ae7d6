"""
Core business logic for enumerating bookable slots on one day.

Pure domain logic: no store access, no I/O. Every call recomputes the
result from the inputs it is given.
"""

from datetime import date
from typing import Iterable, List, Optional

from .availability import AvailabilityResolver
from .intervals import TimeInterval, add_minutes
from .models import Appointment, Professional, Slot


def blocking_appointments(
    appointments: Iterable[Appointment],
    professional_id: str,
    day: date,
    exclude_appointment_id: Optional[str] = None,
) -> List[Appointment]:
    """
    Keep the appointments that occupy the professional's time on the day.

    CANCELLED appointments and records of other professionals or dates are
    dropped, so callers may pass a wider collection.
    """
    return [
        appointment for appointment in appointments
        if appointment.professional_id == professional_id
        and appointment.date == day
        and appointment.status.blocks_time
        and appointment.id != exclude_appointment_id
    ]


class SlotGenerator:
    """
    Generates the ordered list of open slots for a professional and date.

    Algorithm:
    1. Resolve the working day (no day -> no slots)
    2. Walk each working interval from its start in steps of ``slot_interval``
    3. Drop candidates that would run past the end of the interval
    4. Drop candidates overlapping a break or a non-cancelled appointment
    """

    def __init__(self, resolver: AvailabilityResolver):
        self.resolver = resolver

    def generate(
        self,
        professional: Professional,
        day: date,
        appointments: Iterable[Appointment],
        duration_minutes: Optional[int] = None,
    ) -> List[Slot]:
        """
        Enumerate open slots.

        Args:
            professional: Professional to schedule
            day: Tenant-local date
            appointments: Existing appointments (treated as a set)
            duration_minutes: Length of each candidate; defaults to the
                professional's slot interval. Candidates always start on the
                ``slot_interval`` grid.

        Returns:
            Slots in strictly increasing start order
        """
        resolved = self.resolver.resolve(professional, day)
        if resolved is None:
            return []

        step = professional.slot_interval
        duration = duration_minutes or step
        busy = blocking_appointments(appointments, professional.id, day)

        slots: List[Slot] = []

        for working in resolved.intervals:
            current = working.start

            while add_minutes(current, duration) <= working.end:
                candidate = TimeInterval(start=current, end=add_minutes(current, duration))

                if not resolved.overlaps_break(candidate) and not any(
                    appointment.conflicts_with(candidate) for appointment in busy
                ):
                    slots.append(Slot(start=candidate.start, end=candidate.end))

                current = add_minutes(current, step)

        return slots
