"""
Application services for listing slots and booking appointments.

The service fetches professionals and same-day appointments through a store
adapter and delegates every scheduling decision to the domain-level
``SlotGenerator`` and ``BookingValidator``. The store dependency is expressed
as a protocol so the JSON store or a test double can be plugged in.

The no-double-booking guarantee holds only if the store serializes writes per
(professional, date): ``commit_appointment`` must re-read the day's
appointments and run the guard atomically with the write.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Protocol, Sequence

from ..domain.booking_validator import BookingValidator, RejectionReason, ValidationResult
from ..domain.intervals import MINUTES_PER_DAY, TimeInterval, add_minutes, parse_time
from ..domain.models import (
    Appointment,
    AppointmentStatus,
    Professional,
    Service,
    Slot,
    TenantContext,
)
from ..domain.slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class SchedulingStoreProtocol(Protocol):
    """Protocol describing the tenant-scoped store behaviour needed by the service."""

    async def get_professional(self, ctx: TenantContext, professional_id: str) -> Professional:
        """Return the professional, including weekly rules and exceptions."""

    async def list_professionals(self, ctx: TenantContext) -> List[Professional]:
        """Return all professionals of the tenant."""

    async def get_service(self, ctx: TenantContext, service_id: str) -> Service:
        """Return the service."""

    async def get_appointment(self, ctx: TenantContext, appointment_id: str) -> Appointment:
        """Return the appointment."""

    async def list_appointments(
        self,
        ctx: TenantContext,
        professional_id: str,
        day: date,
    ) -> List[Appointment]:
        """Return the professional's appointments on the date."""

    async def commit_appointment(
        self,
        ctx: TenantContext,
        appointment: Appointment,
        guard: Optional[Callable[[Sequence[Appointment]], ValidationResult]] = None,
    ) -> ValidationResult:
        """Write the appointment if the guard passes, serialized per professional and date."""


@dataclass(frozen=True)
class BookingOutcome:
    """Result of a booking write: the stored appointment or the rejection."""
    result: ValidationResult
    appointment: Optional[Appointment] = None

    @property
    def ok(self) -> bool:
        return self.result.ok


class BookingService:
    """
    Orchestrates store lookups, slot generation and booking validation.
    """

    def __init__(
        self,
        store: SchedulingStoreProtocol,
        slot_generator: SlotGenerator,
        booking_validator: BookingValidator,
    ) -> None:
        self._store = store
        self._slot_generator = slot_generator
        self._booking_validator = booking_validator

    async def list_professionals(self, ctx: TenantContext) -> List[Professional]:
        return await self._store.list_professionals(ctx)

    async def available_slots(
        self,
        ctx: TenantContext,
        *,
        professional_id: str,
        day: date,
        service_id: Optional[str] = None,
    ) -> List[Slot]:
        """
        List the open slots of a professional on a date.

        When a service is given, slots are as long as the service while still
        starting on the professional's slot grid.
        """
        professional = await self._store.get_professional(ctx, professional_id)
        duration = await self._duration_for(ctx, professional, service_id)
        appointments = await self._store.list_appointments(ctx, professional_id, day)

        return self._slot_generator.generate(
            professional,
            day,
            appointments,
            duration_minutes=duration,
        )

    async def check_availability(
        self,
        ctx: TenantContext,
        *,
        professional_id: str,
        day: date,
        start: str | int,
        service_id: Optional[str] = None,
    ) -> ValidationResult:
        """Validate a proposed start time without writing anything."""
        professional = await self._store.get_professional(ctx, professional_id)
        duration = await self._duration_for(ctx, professional, service_id)
        appointments = await self._store.list_appointments(ctx, professional_id, day)

        start_minutes = parse_time(start)
        rejection = self._reject_early(professional, day, start_minutes, duration)
        if rejection is not None:
            return rejection

        candidate = TimeInterval(start=start_minutes, end=add_minutes(start_minutes, duration))
        return self._booking_validator.validate(professional, day, candidate, appointments)

    async def book(
        self,
        ctx: TenantContext,
        *,
        professional_id: str,
        day: date,
        start: str | int,
        client_id: str = "",
        service_id: Optional[str] = None,
        notes: str = "",
        status: AppointmentStatus = AppointmentStatus.PENDING,
    ) -> BookingOutcome:
        """
        Validate and persist a new appointment.

        The end time is the start plus the service duration (or the
        professional's slot interval without a service).
        """
        professional = await self._store.get_professional(ctx, professional_id)
        duration = await self._duration_for(ctx, professional, service_id)

        start_minutes = parse_time(start)
        rejection = self._reject_early(professional, day, start_minutes, duration)
        if rejection is not None:
            return BookingOutcome(result=rejection)

        appointment = Appointment(
            id=uuid.uuid4().hex,
            tenant_id=ctx.tenant_id,
            professional_id=professional_id,
            date=day,
            interval=TimeInterval(start=start_minutes, end=add_minutes(start_minutes, duration)),
            status=status,
            client_id=client_id,
            service_id=service_id or "",
            notes=notes,
        )

        return await self._commit(ctx, professional, appointment)

    async def reschedule(
        self,
        ctx: TenantContext,
        *,
        appointment_id: str,
        day: date,
        start: str | int,
    ) -> BookingOutcome:
        """Move an appointment to a new date and start, keeping its duration."""
        current = await self._store.get_appointment(ctx, appointment_id)
        professional = await self._store.get_professional(ctx, current.professional_id)

        start_minutes = parse_time(start)
        duration = current.interval.duration_minutes()
        rejection = self._reject_early(professional, day, start_minutes, duration)
        if rejection is not None:
            return BookingOutcome(result=rejection)

        moved = dataclasses.replace(
            current,
            date=day,
            interval=TimeInterval(start=start_minutes, end=add_minutes(start_minutes, duration)),
        )
        return await self._commit(ctx, professional, moved)

    async def update_status(
        self,
        ctx: TenantContext,
        *,
        appointment_id: str,
        status: AppointmentStatus,
    ) -> BookingOutcome:
        """
        Change the status of an appointment.

        Reactivating a cancelled appointment is validated again, since its
        time may have been booked by someone else meanwhile.
        """
        current = await self._store.get_appointment(ctx, appointment_id)
        updated = dataclasses.replace(current, status=status)

        if not current.status.blocks_time and status.blocks_time:
            professional = await self._store.get_professional(ctx, current.professional_id)
            return await self._commit(ctx, professional, updated)

        result = await self._store.commit_appointment(ctx, updated)
        return BookingOutcome(result=result, appointment=updated)

    async def _commit(
        self,
        ctx: TenantContext,
        professional: Professional,
        appointment: Appointment,
    ) -> BookingOutcome:
        def guard(existing: Sequence[Appointment]) -> ValidationResult:
            return self._booking_validator.validate(
                professional,
                appointment.date,
                appointment.interval,
                existing,
                exclude_appointment_id=appointment.id,
            )

        result = await self._store.commit_appointment(ctx, appointment, guard=guard)
        if not result.ok:
            logger.info(
                "Booking of %s on %s %s rejected: %s",
                professional.id, appointment.date, appointment.interval, result
            )
            return BookingOutcome(result=result)

        return BookingOutcome(result=result, appointment=appointment)

    def _reject_early(
        self,
        professional: Professional,
        day: date,
        start_minutes: int,
        duration: int,
    ) -> Optional[ValidationResult]:
        """
        Reject a request that cannot form a same-day interval.

        Runs before the interval is built, keeping the validator's order: a
        closed day reports NoAvailability even for a start near midnight.
        """
        if self._booking_validator.resolver.resolve(professional, day) is None:
            return ValidationResult.rejected(RejectionReason.NO_AVAILABILITY)
        if add_minutes(start_minutes, duration) > MINUTES_PER_DAY:
            return ValidationResult.rejected(RejectionReason.OUTSIDE_WORKING_HOURS)
        return None

    async def _duration_for(
        self,
        ctx: TenantContext,
        professional: Professional,
        service_id: Optional[str],
    ) -> int:
        if not service_id:
            return professional.slot_interval
        service = await self._store.get_service(ctx, service_id)
        return service.duration_minutes
