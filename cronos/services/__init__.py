"""
Service layer helpers that orchestrate the store and domain logic.
"""

from .booking_service import BookingOutcome, BookingService, SchedulingStoreProtocol

__all__ = ["BookingOutcome", "BookingService", "SchedulingStoreProtocol"]
