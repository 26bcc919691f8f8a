# rx_core/schedules/repositories.py
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F, Max
from django.utils.timezone import now

from rx_core.common.errors import DomainError
from rx_core.schedules.domain import ShiftChangeRecord, ShiftRecord
from rx_core.schedules.exceptions import ScheduleStorageError, ShiftNotFound, StaleShiftError
from rx_core.schedules.models import Shift, ShiftChangeEvent

# Columns a repository update may touch
SHIFT_MUTABLE_FIELDS = frozenset(
    {
        "pharmacist_id",
        "schedule_date",
        "start_time",
        "end_time",
        "break_minutes",
        "work_type",
        "status",
        "work_location",
        "work_description",
    }
)


@contextmanager
def storage_call(action: str) -> Iterator[None]:
    """
    Re-raise collaborator failures as ScheduleStorageError("Failed to <action>: ...").
    Domain errors pass through untouched.
    """
    try:
        yield
    except DomainError:
        raise
    except Exception as exc:
        raise ScheduleStorageError(f"Failed to {action}: {exc}") from exc


class ShiftRepository(ABC):
    @abstractmethod
    def create(self, shift: ShiftRecord) -> ShiftRecord:
        ...

    @abstractmethod
    def update(self, shift_id: UUID, changes: dict[str, Any], *, expected_version: int) -> ShiftRecord:
        """
        Apply `changes` only if the stored version still equals `expected_version`.
        Raises ShiftNotFound / StaleShiftError.
        """

    @abstractmethod
    def delete(self, shift_id: UUID) -> bool:
        """Hard delete. Returns False when nothing matched."""

    @abstractmethod
    def find_by_id(self, shift_id: UUID) -> Optional[ShiftRecord]:
        ...

    @abstractmethod
    def find_by_date_range(
        self,
        start_date: date,
        end_date: date,
        *,
        pharmacist_id: Optional[UUID] = None,
        pharmacy_id: Optional[UUID] = None,
    ) -> list[ShiftRecord]:
        """Inclusive range, ordered by (schedule_date, start_time)."""


class ChangeEventLog(ABC):
    @abstractmethod
    def append(self, event: ShiftChangeRecord) -> ShiftChangeRecord:
        ...

    @abstractmethod
    def find_by_shift(self, shift_id: UUID) -> list[ShiftChangeRecord]:
        """Most recent first."""


# -------------------------
# Django ORM implementations
# -------------------------
def shift_to_record(shift: Shift) -> ShiftRecord:
    return ShiftRecord(
        id=shift.id,
        pharmacist_id=shift.pharmacist_id,
        pharmacy_id=shift.pharmacy_id,
        schedule_date=shift.schedule_date,
        start_time=shift.start_time,
        end_time=shift.end_time,
        break_minutes=shift.break_minutes,
        work_type=shift.work_type,
        status=shift.status,
        work_location=shift.work_location,
        work_description=shift.work_description,
        created_by_id=shift.created_by_id,
        version=shift.version,
        created_at=shift.created_at,
        updated_at=shift.updated_at,
    )


def event_to_record(event: ShiftChangeEvent) -> ShiftChangeRecord:
    return ShiftChangeRecord(
        id=event.id,
        shift_id=event.shift_id,
        sequence=event.sequence,
        change_type=event.change_type,
        changed_by_id=event.changed_by_id,
        reason=event.reason,
        previous_values=event.previous_values,
        new_values=event.new_values,
        substitute_requested=event.substitute_requested,
        suggested_pharmacist_id=event.suggested_pharmacist_id,
        suggestion_accepted=event.suggestion_accepted,
        created_at=event.created_at,
    )


class DjangoShiftRepository(ShiftRepository):
    def create(self, shift: ShiftRecord) -> ShiftRecord:
        obj = Shift.objects.create(
            pharmacist_id=shift.pharmacist_id,
            pharmacy_id=shift.pharmacy_id,
            created_by_id=shift.created_by_id,
            schedule_date=shift.schedule_date,
            start_time=shift.start_time,
            end_time=shift.end_time,
            break_minutes=shift.break_minutes,
            work_type=shift.work_type,
            status=shift.status,
            work_location=shift.work_location,
            work_description=shift.work_description,
        )
        return shift_to_record(obj)

    @transaction.atomic
    def update(self, shift_id: UUID, changes: dict[str, Any], *, expected_version: int) -> ShiftRecord:
        unknown = set(changes) - SHIFT_MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported shift fields: {sorted(unknown)}")

        matched = Shift.objects.filter(id=shift_id, version=expected_version).update(
            **changes,
            version=F("version") + 1,
            updated_at=now(),
        )
        if not matched:
            if not Shift.objects.filter(id=shift_id).exists():
                raise ShiftNotFound()
            raise StaleShiftError()

        return shift_to_record(Shift.objects.get(id=shift_id))

    def delete(self, shift_id: UUID) -> bool:
        deleted, _ = Shift.objects.filter(id=shift_id).delete()
        return deleted > 0

    def find_by_id(self, shift_id: UUID) -> Optional[ShiftRecord]:
        obj = Shift.objects.filter(id=shift_id).first()
        return shift_to_record(obj) if obj else None

    def find_by_date_range(
        self,
        start_date: date,
        end_date: date,
        *,
        pharmacist_id: Optional[UUID] = None,
        pharmacy_id: Optional[UUID] = None,
    ) -> list[ShiftRecord]:
        qs = Shift.objects.filter(schedule_date__gte=start_date, schedule_date__lte=end_date)
        if pharmacist_id:
            qs = qs.filter(pharmacist_id=pharmacist_id)
        if pharmacy_id:
            qs = qs.filter(pharmacy_id=pharmacy_id)
        return [shift_to_record(s) for s in qs.order_by("schedule_date", "start_time", "created_at")]


class DjangoChangeEventLog(ChangeEventLog):
    def append(self, event: ShiftChangeRecord) -> ShiftChangeRecord:
        # Savepoint: a failed append must not poison the caller's transaction
        with transaction.atomic(savepoint=True):
            last = ShiftChangeEvent.objects.filter(shift_id=event.shift_id).aggregate(m=Max("sequence"))["m"]
            obj = ShiftChangeEvent.objects.create(
                shift_id=event.shift_id,
                sequence=(last or 0) + 1,
                change_type=event.change_type,
                changed_by_id=event.changed_by_id,
                reason=event.reason,
                previous_values=event.previous_values,
                new_values=event.new_values,
                substitute_requested=event.substitute_requested,
                suggested_pharmacist_id=event.suggested_pharmacist_id,
                suggestion_accepted=event.suggestion_accepted,
            )
        return event_to_record(obj)

    def find_by_shift(self, shift_id: UUID) -> list[ShiftChangeRecord]:
        qs = ShiftChangeEvent.objects.filter(shift_id=shift_id).order_by("-sequence")
        return [event_to_record(e) for e in qs]
