"""
Shared fixtures for scheduling tests.
"""

import pytest

from cronos.domain.availability import AvailabilityResolver
from cronos.domain.booking_validator import BookingValidator
from cronos.domain.slot_generator import SlotGenerator


@pytest.fixture
def resolver() -> AvailabilityResolver:
    return AvailabilityResolver()


@pytest.fixture
def generator(resolver) -> SlotGenerator:
    return SlotGenerator(resolver)


@pytest.fixture
def validator(resolver) -> BookingValidator:
    return BookingValidator(resolver)
