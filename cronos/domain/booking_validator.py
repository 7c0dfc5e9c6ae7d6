"""
Validation of a single proposed booking interval.

Uses the same rules as the slot generator without enumerating slots.
Rejections are returned as values; they are expected, user-facing outcomes.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional, Tuple

from .availability import AvailabilityResolver
from .intervals import TimeInterval
from .models import Appointment, Professional
from .slot_generator import blocking_appointments


class RejectionReason(str, Enum):
    """Why a candidate interval cannot be booked, in evaluation order."""
    NO_AVAILABILITY = "NoAvailability"
    OUTSIDE_WORKING_HOURS = "OutsideWorkingHours"
    BREAK_CONFLICT = "BreakConflict"
    DOUBLE_BOOKED = "DoubleBooked"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    RejectionReason.NO_AVAILABILITY: "The professional does not work on this date.",
    RejectionReason.OUTSIDE_WORKING_HOURS: "The requested time is outside working hours or off the slot grid.",
    RejectionReason.BREAK_CONFLICT: "The requested time overlaps a break.",
    RejectionReason.DOUBLE_BOOKED: "The requested time overlaps an existing appointment.",
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a candidate interval."""
    reason: Optional[RejectionReason] = None
    conflicting_ids: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.reason is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def accepted(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        conflicting_ids: Tuple[str, ...] = (),
    ) -> "ValidationResult":
        return cls(reason=reason, conflicting_ids=conflicting_ids)

    def __str__(self) -> str:
        return "Ok" if self.ok else f"Rejected({self.reason.value})"


class BookingValidator:
    """Checks whether one specific interval is currently bookable."""

    def __init__(self, resolver: AvailabilityResolver):
        self.resolver = resolver

    def validate(
        self,
        professional: Professional,
        day: date,
        candidate: TimeInterval,
        appointments: Iterable[Appointment],
        exclude_appointment_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate a candidate interval; the first failing check wins.

        Args:
            professional: Professional to book
            day: Tenant-local date
            candidate: Proposed ``[start, end)`` interval
            appointments: Existing appointments (treated as a set)
            exclude_appointment_id: Appointment to ignore, used when an
                existing appointment is being moved

        Returns:
            ValidationResult, truthy when the interval is bookable
        """
        resolved = self.resolver.resolve(professional, day)
        if resolved is None:
            return ValidationResult.rejected(RejectionReason.NO_AVAILABILITY)

        working = resolved.working_interval_for(candidate)
        if working is None:
            return ValidationResult.rejected(RejectionReason.OUTSIDE_WORKING_HOURS)

        # Bookable starts sit on the slot grid of their working interval.
        if (candidate.start - working.start) % professional.slot_interval:
            return ValidationResult.rejected(RejectionReason.OUTSIDE_WORKING_HOURS)

        if resolved.overlaps_break(candidate):
            return ValidationResult.rejected(RejectionReason.BREAK_CONFLICT)

        conflicts = tuple(
            appointment.id
            for appointment in blocking_appointments(
                appointments, professional.id, day, exclude_appointment_id
            )
            if appointment.conflicts_with(candidate)
        )
        if conflicts:
            return ValidationResult.rejected(RejectionReason.DOUBLE_BOOKED, conflicts)

        return ValidationResult.accepted()
