"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .availability import AvailabilityResolver
from .booking_validator import BookingValidator, RejectionReason, ValidationResult
from .intervals import TimeInterval
from .models import (
    Appointment,
    AppointmentStatus,
    DateException,
    Professional,
    ResolvedDay,
    Service,
    Slot,
    TenantContext,
    WeeklyRule,
)
from .slot_generator import SlotGenerator

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "AvailabilityResolver",
    "BookingValidator",
    "DateException",
    "Professional",
    "RejectionReason",
    "ResolvedDay",
    "Service",
    "Slot",
    "SlotGenerator",
    "TenantContext",
    "TimeInterval",
    "ValidationResult",
    "WeeklyRule",
]
