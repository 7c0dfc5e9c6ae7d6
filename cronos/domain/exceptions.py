"""
Domain-specific exception hierarchy for the scheduling engine.

Booking rejections are not exceptions: they are returned as
``ValidationResult`` values by the booking validator.
"""


class CronosError(Exception):
    """Base class for all application-level errors."""


class InvalidScheduleError(CronosError, ValueError):
    """Raised when schedule configuration or records are malformed."""


class NotFoundError(CronosError, LookupError):
    """Raised when a record does not exist for the caller's tenant."""


class TenantAccessError(CronosError):
    """Raised when a write targets a record owned by another tenant."""


class StoreError(CronosError):
    """Raised when the backing store cannot be read or written."""
