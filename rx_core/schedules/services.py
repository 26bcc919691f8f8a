# rx_core/schedules/services.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, time
from typing import Any, Optional
from uuid import UUID

from django.conf import settings

from rx_core.pharmacies.directory import DjangoPharmacistDirectory, PharmacistDirectory
from rx_core.schedules.conflicts import ConflictDetector
from rx_core.schedules.constants import (
    CANCELLABLE_STATUSES,
    STATUS_TRANSITIONS,
    ChangeType,
    ShiftStatus,
    WorkType,
)
from rx_core.schedules.domain import ShiftChange, ShiftChangeRecord, ShiftRecord
from rx_core.schedules.exceptions import (
    PharmacistNotFound,
    PharmacyNotFound,
    ScheduleConflictError,
    ScheduleStorageError,
    ScheduleValidationError,
    ShiftNotFound,
)
from rx_core.schedules.repositories import (
    ChangeEventLog,
    DjangoChangeEventLog,
    DjangoShiftRepository,
    ShiftRepository,
    storage_call,
)
from rx_core.schedules.timerange import validate_window

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "schedule_date",
    "start_time",
    "end_time",
    "break_minutes",
    "work_type",
    "work_location",
    "work_description",
    "status",
)
WINDOW_FIELDS = ("schedule_date", "start_time", "end_time")
TEXT_FIELDS = ("work_location", "work_description")


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _json_value(value: Any) -> Any:
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def _snapshot(shift: ShiftRecord, fields) -> dict[str, Any]:
    return {f: _json_value(getattr(shift, f)) for f in fields}


def _scheduling_setting(name: str, default: Any) -> Any:
    return getattr(settings, "RX_SCHEDULING", {}).get(name, default)


class ScheduleService:
    """
    Shift write-model operations (lifecycle + audit trail).

    Notes:
    - Status is forward-only: scheduled -> confirmed -> completed; cancel from scheduled/confirmed.
    - Reschedule and substitute work on any status and never change it.
    - Every mutation appends exactly one ShiftChangeEvent after the data write.
      A failed append is logged and reported on ShiftChange.history_error;
      the data write is not rolled back.
    - Creation and delete write no history.
    """

    def __init__(
        self,
        *,
        shifts: Optional[ShiftRepository] = None,
        events: Optional[ChangeEventLog] = None,
        directory: Optional[PharmacistDirectory] = None,
        conflicts: Optional[ConflictDetector] = None,
    ):
        self.shifts = shifts or DjangoShiftRepository()
        self.events = events or DjangoChangeEventLog()
        self.directory = directory or DjangoPharmacistDirectory()
        self.conflicts = conflicts or ConflictDetector(self.shifts)

    # -------------------------
    # Internal helpers
    # -------------------------
    def _get(self, shift_id: UUID) -> ShiftRecord:
        with storage_call("load shift"):
            shift = self.shifts.find_by_id(shift_id)
        if shift is None:
            raise ShiftNotFound()
        return shift

    def _require_pharmacist(self, pharmacist_id: UUID, *, field: str = "pharmacist_id") -> None:
        with storage_call("load pharmacist"):
            found = self.directory.find_by_id(pharmacist_id)
        if found is None:
            raise PharmacistNotFound(f"Pharmacist {pharmacist_id} not found.", field=field)
        if not found.is_active:
            raise ScheduleValidationError(f"Pharmacist {pharmacist_id} is inactive.", field=field)

    def _require_pharmacy(self, pharmacy_id: UUID) -> None:
        with storage_call("load pharmacy"):
            known = self.directory.pharmacy_exists(pharmacy_id)
        if not known:
            raise PharmacyNotFound(f"Pharmacy {pharmacy_id} not found.", field="pharmacy_id")

    def _ensure_no_conflict(
        self,
        *,
        pharmacist_id: UUID,
        on_date: date,
        start: time,
        end: time,
        exclude_shift_id: Optional[UUID] = None,
    ) -> None:
        clashes = self.conflicts.find_conflicts(pharmacist_id, on_date, start, end, exclude_shift_id)
        if clashes:
            logger.warning(
                "Rejected double booking for pharmacist %s on %s %s-%s (clashes: %s)",
                pharmacist_id,
                on_date,
                start,
                end,
                [str(c.id) for c in clashes],
            )
            raise ScheduleConflictError(
                f"Pharmacist already has a shift overlapping {on_date} {start:%H:%M}-{end:%H:%M}.",
                conflicting_shift_ids=[c.id for c in clashes],
            )

    def _apply(self, shift: ShiftRecord, changes: dict[str, Any], action: str) -> ShiftRecord:
        with storage_call(action):
            return self.shifts.update(shift.id, changes, expected_version=shift.version)

    def _record(self, event: ShiftChangeRecord) -> tuple[Optional[ShiftChangeRecord], Optional[Exception]]:
        try:
            with storage_call("record shift history"):
                return self.events.append(event), None
        except ScheduleStorageError as exc:
            logger.error(
                "Shift %s changed (%s) but history append failed; audit trail diverged: %s",
                event.shift_id,
                event.change_type,
                exc,
            )
            return None, exc

    def _commit(
        self,
        shift: ShiftRecord,
        changes: dict[str, Any],
        event: ShiftChangeRecord,
        action: str,
    ) -> ShiftChange:
        updated = self._apply(shift, changes, action)
        stored, history_error = self._record(event)
        logger.info("Shift %s %s by user %s", shift.id, event.change_type, event.changed_by_id)
        return ShiftChange(shift=updated, event=stored, history_error=history_error)

    # -------------------------
    # Reads
    # -------------------------
    def get_shift(self, shift_id: UUID) -> ShiftRecord:
        return self._get(shift_id)

    def list_shifts(
        self,
        *,
        start_date: date,
        end_date: date,
        pharmacist_id: Optional[UUID] = None,
        pharmacy_id: Optional[UUID] = None,
    ) -> list[ShiftRecord]:
        if end_date < start_date:
            raise ScheduleValidationError("end_date must not be before start_date.", field="end_date")
        with storage_call("load shifts"):
            return self.shifts.find_by_date_range(
                start_date,
                end_date,
                pharmacist_id=pharmacist_id,
                pharmacy_id=pharmacy_id,
            )

    def history(self, shift_id: UUID) -> list[ShiftChangeRecord]:
        with storage_call("load shift history"):
            return self.events.find_by_shift(shift_id)

    # -------------------------
    # Create (no history event)
    # -------------------------
    def create_shift(
        self,
        *,
        pharmacist_id: UUID,
        pharmacy_id: UUID,
        schedule_date: date,
        start_time: time,
        end_time: time,
        break_minutes: int = 0,
        work_type: str = WorkType.REGULAR,
        status: str = ShiftStatus.SCHEDULED,
        work_location: Optional[str] = None,
        work_description: Optional[str] = None,
        created_by_id: Optional[int] = None,
        check_conflicts: Optional[bool] = None,
    ) -> ShiftRecord:
        if pharmacist_id is None:
            raise ScheduleValidationError("Pharmacist is required.", field="pharmacist_id")
        if pharmacy_id is None:
            raise ScheduleValidationError("Pharmacy is required.", field="pharmacy_id")
        if schedule_date is None:
            raise ScheduleValidationError("Schedule date is required.", field="schedule_date")
        if break_minutes is None:
            break_minutes = 0
        validate_window(start_time, end_time, break_minutes)
        if work_type not in WorkType.values:
            raise ScheduleValidationError(f"Unknown work type '{work_type}'.", field="work_type")
        if status not in ShiftStatus.values:
            raise ScheduleValidationError(f"Unknown status '{status}'.", field="status")

        self._require_pharmacist(pharmacist_id)
        self._require_pharmacy(pharmacy_id)

        if check_conflicts is None:
            check_conflicts = _scheduling_setting("CHECK_CONFLICTS_ON_CREATE", True)
        if check_conflicts and status != ShiftStatus.CANCELLED:
            self._ensure_no_conflict(
                pharmacist_id=pharmacist_id,
                on_date=schedule_date,
                start=start_time,
                end=end_time,
            )

        draft = ShiftRecord(
            pharmacist_id=pharmacist_id,
            pharmacy_id=pharmacy_id,
            schedule_date=schedule_date,
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            work_type=work_type,
            status=status,
            work_location=_clean_text(work_location),
            work_description=_clean_text(work_description),
            created_by_id=created_by_id,
        )
        with storage_call("create shift"):
            shift = self.shifts.create(draft)

        logger.info(
            "Shift %s created for pharmacist %s on %s %s-%s",
            shift.id,
            pharmacist_id,
            schedule_date,
            start_time,
            end_time,
        )
        return shift

    # -------------------------
    # Generic update
    # -------------------------
    def update_shift(
        self,
        shift_id: UUID,
        *,
        changes: dict[str, Any],
        actor_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> ShiftChange:
        """
        Rewrite any subset of UPDATABLE_FIELDS. Only fields whose value
        actually changes are written and snapshotted; nothing changed => no-op.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            field = sorted(unknown)[0]
            raise ScheduleValidationError(f"Field '{field}' cannot be updated.", field=field)

        shift = self._get(shift_id)

        requested = dict(changes)
        for f in TEXT_FIELDS:
            if f in requested:
                requested[f] = _clean_text(requested[f])
        for f in ("schedule_date", "start_time", "end_time", "break_minutes", "work_type", "status"):
            if f in requested and requested[f] is None:
                raise ScheduleValidationError(f"{f} cannot be empty.", field=f)

        diff = {f: v for f, v in requested.items() if getattr(shift, f) != v}
        if not diff:
            return ShiftChange(shift=shift)

        merged = replace(shift, **diff)
        validate_window(merged.start_time, merged.end_time, merged.break_minutes)

        if "work_type" in diff and merged.work_type not in WorkType.values:
            raise ScheduleValidationError(f"Unknown work type '{merged.work_type}'.", field="work_type")

        if "status" in diff:
            if merged.status not in ShiftStatus.values:
                raise ScheduleValidationError(f"Unknown status '{merged.status}'.", field="status")
            if merged.status not in STATUS_TRANSITIONS[shift.status]:
                raise ScheduleValidationError(
                    f"Cannot move shift from {shift.status} to {merged.status}.",
                    field="status",
                )

        window_changed = any(f in diff for f in WINDOW_FIELDS)
        if merged.is_active and window_changed:
            self._ensure_no_conflict(
                pharmacist_id=merged.pharmacist_id,
                on_date=merged.schedule_date,
                start=merged.start_time,
                end=merged.end_time,
                exclude_shift_id=shift.id,
            )

        fields = [f for f in UPDATABLE_FIELDS if f in diff]
        event = ShiftChangeRecord(
            shift_id=shift.id,
            change_type=ChangeType.UPDATE,
            changed_by_id=actor_id,
            reason=_clean_text(reason),
            previous_values=_snapshot(shift, fields),
            new_values=_snapshot(merged, fields),
        )
        return self._commit(shift, diff, event, "update shift")

    # -------------------------
    # Cancel
    # -------------------------
    def cancel_shift(
        self,
        shift_id: UUID,
        *,
        actor_id: Optional[int] = None,
        reason: Optional[str] = None,
        suggest_substitute: bool = False,
    ) -> ShiftChange:
        """
        scheduled/confirmed -> cancelled. `suggest_substitute` only flags the
        request on the event; suggestions come from SubstituteMatcher.
        """
        shift = self._get(shift_id)

        if shift.status not in CANCELLABLE_STATUSES:
            raise ScheduleValidationError(f"Cannot cancel a {shift.status} shift.", field="status")

        event = ShiftChangeRecord(
            shift_id=shift.id,
            change_type=ChangeType.CANCEL,
            changed_by_id=actor_id,
            reason=_clean_text(reason),
            previous_values={"status": shift.status},
            new_values={"status": ShiftStatus.CANCELLED.value},
            substitute_requested=bool(suggest_substitute),
        )
        return self._commit(shift, {"status": ShiftStatus.CANCELLED}, event, "cancel shift")

    # -------------------------
    # Reschedule (date/time only)
    # -------------------------
    def reschedule_shift(
        self,
        shift_id: UUID,
        *,
        schedule_date: date,
        start_time: time,
        end_time: time,
        actor_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> ShiftChange:
        if schedule_date is None:
            raise ScheduleValidationError("New schedule date is required.", field="schedule_date")

        shift = self._get(shift_id)
        validate_window(start_time, end_time, shift.break_minutes)

        if (schedule_date, start_time, end_time) == (shift.schedule_date, shift.start_time, shift.end_time):
            raise ScheduleValidationError(
                "New date and time are identical to the current shift.",
                field="schedule_date",
            )

        if shift.is_active:
            self._ensure_no_conflict(
                pharmacist_id=shift.pharmacist_id,
                on_date=schedule_date,
                start=start_time,
                end=end_time,
                exclude_shift_id=shift.id,
            )

        changes = {"schedule_date": schedule_date, "start_time": start_time, "end_time": end_time}
        event = ShiftChangeRecord(
            shift_id=shift.id,
            change_type=ChangeType.RESCHEDULE,
            changed_by_id=actor_id,
            reason=_clean_text(reason),
            previous_values=_snapshot(shift, WINDOW_FIELDS),
            new_values={f: _json_value(v) for f, v in changes.items()},
        )
        return self._commit(shift, changes, event, "reschedule shift")

    # -------------------------
    # Substitute (assignee only)
    # -------------------------
    def substitute_pharmacist(
        self,
        shift_id: UUID,
        *,
        new_pharmacist_id: UUID,
        actor_id: Optional[int] = None,
        reason: Optional[str] = None,
        suggested_pharmacist_id: Optional[UUID] = None,
    ) -> ShiftChange:
        if new_pharmacist_id is None:
            raise ScheduleValidationError("Substitute pharmacist is required.", field="new_pharmacist_id")

        shift = self._get(shift_id)

        if new_pharmacist_id == shift.pharmacist_id:
            raise ScheduleValidationError(
                "Substitute must differ from the assigned pharmacist.",
                field="new_pharmacist_id",
            )

        self._require_pharmacist(new_pharmacist_id, field="new_pharmacist_id")

        if shift.is_active:
            self._ensure_no_conflict(
                pharmacist_id=new_pharmacist_id,
                on_date=shift.schedule_date,
                start=shift.start_time,
                end=shift.end_time,
                exclude_shift_id=shift.id,
            )

        accepted = None
        if suggested_pharmacist_id is not None:
            accepted = suggested_pharmacist_id == new_pharmacist_id

        event = ShiftChangeRecord(
            shift_id=shift.id,
            change_type=ChangeType.SUBSTITUTE,
            changed_by_id=actor_id,
            reason=_clean_text(reason),
            previous_values={"pharmacist_id": str(shift.pharmacist_id)},
            new_values={"pharmacist_id": str(new_pharmacist_id)},
            suggested_pharmacist_id=suggested_pharmacist_id,
            suggestion_accepted=accepted,
        )
        return self._commit(shift, {"pharmacist_id": new_pharmacist_id}, event, "substitute pharmacist")

    # -------------------------
    # Delete (erroneous entries; bypasses history)
    # -------------------------
    def delete_shift(self, shift_id: UUID) -> None:
        with storage_call("delete shift"):
            deleted = self.shifts.delete(shift_id)
        if not deleted:
            raise ShiftNotFound()
        logger.info("Shift %s deleted (no history written)", shift_id)
