"""
Tenant-scoped record store backed by a JSON document.

The document keeps the camelCase record layout used by the booking product:

    {
      "professionals": [{"id", "tenantId", "name", "slotInterval",
                         "availability": [...], "exceptions": [...]}],
      "services": [{"id", "tenantId", "name", "durationMinutes", "price"}],
      "appointments": [{"id", "tenantId", "professionalId", "date",
                        "startTime", "endTime", "status", ...}]
    }

Every read is filtered by the caller's tenant; records of other tenants are
reported as not found.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..domain.booking_validator import ValidationResult
from ..domain.exceptions import InvalidScheduleError, NotFoundError, StoreError, TenantAccessError
from ..domain.intervals import TimeInterval, parse_date
from ..domain.models import (
    Appointment,
    AppointmentStatus,
    DateException,
    Professional,
    Service,
    TenantContext,
    WeeklyRule,
)

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
AppointmentGuard = Callable[[Sequence[Appointment]], ValidationResult]

COLLECTIONS = ("professionals", "services", "appointments")


def _intervals(record: Record, list_key: str, start_key: str, end_key: str) -> Tuple[TimeInterval, ...]:
    """Read either a list of ``{start, end}`` items or a single start/end pair."""
    if list_key in record:
        return tuple(
            TimeInterval.parse(item["start"], item["end"])
            for item in record[list_key] or []
        )

    start, end = record.get(start_key), record.get(end_key)
    if start and end:
        return (TimeInterval.parse(start, end),)
    if start or end:
        raise InvalidScheduleError(f"Record needs both '{start_key}' and '{end_key}'")
    return ()


def _flag(record: Record, key: str, default: bool) -> bool:
    """Read a JSON boolean; strings such as "false" are rejected."""
    value = record.get(key, default)
    if not isinstance(value, bool):
        raise InvalidScheduleError(f"'{key}' must be true or false, got {value!r}")
    return value


def weekly_rule_from_record(record: Record) -> WeeklyRule:
    return WeeklyRule(
        day_of_week=int(record["dayOfWeek"]),
        active=_flag(record, "active", True),
        intervals=_intervals(record, "intervals", "start", "end"),
        breaks=_intervals(record, "breaks", "breakStart", "breakEnd"),
    )


def date_exception_from_record(record: Record) -> DateException:
    return DateException(
        date=parse_date(record["date"]),
        active=_flag(record, "active", False),
        intervals=_intervals(record, "intervals", "start", "end"),
        breaks=_intervals(record, "breaks", "breakStart", "breakEnd"),
        reason=record.get("reason", ""),
    )


def professional_from_record(record: Record, default_slot_interval: int = 60) -> Professional:
    """
    Build a Professional from its stored record.

    Raises:
        InvalidScheduleError: If the record is incomplete or inconsistent
    """
    try:
        return Professional(
            id=record["id"],
            tenant_id=record["tenantId"],
            name=record.get("name", ""),
            slot_interval=int(record.get("slotInterval") or default_slot_interval),
            weekly_rules=tuple(
                weekly_rule_from_record(rule) for rule in record.get("availability", [])
            ),
            exceptions=tuple(
                date_exception_from_record(exc) for exc in record.get("exceptions", [])
            ),
            email=record.get("email", ""),
            specialty=record.get("specialty", ""),
        )
    except InvalidScheduleError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidScheduleError(
            f"Malformed professional record {record.get('id', '?')}: {exc!r}"
        ) from exc


def service_from_record(record: Record) -> Service:
    try:
        return Service(
            id=record["id"],
            tenant_id=record["tenantId"],
            name=record.get("name", ""),
            duration_minutes=int(record["durationMinutes"]),
            price=float(record.get("price", 0)),
        )
    except InvalidScheduleError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidScheduleError(
            f"Malformed service record {record.get('id', '?')}: {exc!r}"
        ) from exc


def appointment_from_record(record: Record) -> Appointment:
    try:
        return Appointment(
            id=record["id"],
            tenant_id=record["tenantId"],
            professional_id=record["professionalId"],
            date=parse_date(record["date"]),
            interval=TimeInterval.parse(record["startTime"], record["endTime"]),
            status=AppointmentStatus(record.get("status", AppointmentStatus.PENDING.value)),
            client_id=record.get("clientId", ""),
            service_id=record.get("serviceId", ""),
            notes=record.get("notes", ""),
        )
    except InvalidScheduleError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidScheduleError(
            f"Malformed appointment record {record.get('id', '?')}: {exc!r}"
        ) from exc


def appointment_to_record(appointment: Appointment) -> Record:
    return {
        "id": appointment.id,
        "tenantId": appointment.tenant_id,
        "professionalId": appointment.professional_id,
        "clientId": appointment.client_id,
        "serviceId": appointment.service_id,
        "date": appointment.date.isoformat(),
        "startTime": appointment.start_time,
        "endTime": appointment.end_time,
        "status": appointment.status.value,
        "notes": appointment.notes,
    }


class JsonStore:
    """
    JSON-document store implementing the scheduling store boundary.

    Writes of appointments go through ``commit_appointment``, which holds a
    lock per (tenant, professional, date), re-reads that day's appointments
    and runs the caller's validation guard before writing. Within one
    process this serializes competing bookings for the same day.
    """

    def __init__(
        self,
        data: Optional[Record] = None,
        path: Optional[Path] = None,
        default_slot_interval: int = 60,
    ):
        """
        Initialize the store.

        Args:
            data: In-memory document; loaded from ``path`` when omitted
            path: JSON file to load from and persist to (optional)
            default_slot_interval: Slot interval for professionals without one
        """
        self.path = path
        self.default_slot_interval = default_slot_interval
        self._data: Record = copy.deepcopy(data) if data is not None else self._load()
        for collection in COLLECTIONS:
            self._data.setdefault(collection, [])
        self._locks: Dict[Tuple[str, str, date], asyncio.Lock] = {}
        self._lock_users: Dict[Tuple[str, str, date], int] = {}

    @classmethod
    def from_file(cls, path: Path, default_slot_interval: int = 60) -> "JsonStore":
        return cls(path=path, default_slot_interval=default_slot_interval)

    def _load(self) -> Record:
        """Load the document from disk; a missing file starts an empty store."""
        if self.path is None or not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Could not read store file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StoreError(f"Store file {self.path} must contain a JSON object")
        return data

    def _persist(self) -> None:
        if self.path is None:
            return

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StoreError(f"Could not write store file {self.path}: {exc}") from exc

    def _owned(self, collection: str, ctx: TenantContext) -> List[Record]:
        return [
            record for record in self._data[collection]
            if record.get("tenantId") == ctx.tenant_id
        ]

    def _find(self, collection: str, ctx: TenantContext, record_id: str) -> Record:
        for record in self._owned(collection, ctx):
            if record.get("id") == record_id:
                return record
        raise NotFoundError(f"No {collection[:-1]} '{record_id}' for tenant '{ctx.tenant_id}'")

    async def get_professional(self, ctx: TenantContext, professional_id: str) -> Professional:
        record = self._find("professionals", ctx, professional_id)
        return professional_from_record(record, self.default_slot_interval)

    async def list_professionals(self, ctx: TenantContext) -> List[Professional]:
        return [
            professional_from_record(record, self.default_slot_interval)
            for record in self._owned("professionals", ctx)
        ]

    async def get_service(self, ctx: TenantContext, service_id: str) -> Service:
        return service_from_record(self._find("services", ctx, service_id))

    async def get_appointment(self, ctx: TenantContext, appointment_id: str) -> Appointment:
        return appointment_from_record(self._find("appointments", ctx, appointment_id))

    async def list_appointments(
        self,
        ctx: TenantContext,
        professional_id: str,
        day: date,
    ) -> List[Appointment]:
        """Return the professional's appointments on the date, any status."""
        return self._appointments_for_day(ctx, professional_id, day)

    def _appointments_for_day(
        self,
        ctx: TenantContext,
        professional_id: str,
        day: date,
    ) -> List[Appointment]:
        day_str = day.isoformat()
        return [
            appointment_from_record(record)
            for record in self._owned("appointments", ctx)
            if record.get("professionalId") == professional_id and record.get("date") == day_str
        ]

    @contextlib.asynccontextmanager
    async def day_lock(self, ctx: TenantContext, professional_id: str, day: date):
        """
        Hold the write lock of one (tenant, professional, date).

        Locks are counted by their holders and waiters and dropped when the
        last one leaves, so the map only keeps days being written.
        """
        key = (ctx.tenant_id, professional_id, day)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def commit_appointment(
        self,
        ctx: TenantContext,
        appointment: Appointment,
        guard: Optional[AppointmentGuard] = None,
    ) -> ValidationResult:
        """
        Insert or replace an appointment under the per-day write lock.

        Args:
            ctx: Caller's tenant context
            appointment: Appointment to write (replaces a record with the same id)
            guard: Validation run against the day's other appointments while
                the lock is held; the write only happens if it passes

        Returns:
            The guard's result, or an accepted result when no guard is given

        Raises:
            TenantAccessError: If the appointment belongs to another tenant
        """
        if appointment.tenant_id != ctx.tenant_id:
            raise TenantAccessError(
                f"Appointment '{appointment.id}' belongs to tenant "
                f"'{appointment.tenant_id}', not '{ctx.tenant_id}'"
            )

        async with self.day_lock(ctx, appointment.professional_id, appointment.date):
            others = [
                existing
                for existing in self._appointments_for_day(
                    ctx, appointment.professional_id, appointment.date
                )
                if existing.id != appointment.id
            ]

            result = guard(others) if guard is not None else ValidationResult.accepted()
            if not result.ok:
                logger.info(
                    "Appointment %s rejected for %s on %s: %s",
                    appointment.id, appointment.professional_id, appointment.date, result
                )
                return result

            records = self._data["appointments"]
            for index, record in enumerate(records):
                if record.get("id") == appointment.id:
                    if record.get("tenantId") != ctx.tenant_id:
                        raise TenantAccessError(
                            f"Appointment '{appointment.id}' is owned by another tenant"
                        )
                    records[index] = appointment_to_record(appointment)
                    break
            else:
                records.append(appointment_to_record(appointment))

            self._persist()
            logger.info(
                "Stored appointment %s for %s on %s %s (%s)",
                appointment.id, appointment.professional_id, appointment.date,
                appointment.interval, appointment.status.value
            )
            return result
