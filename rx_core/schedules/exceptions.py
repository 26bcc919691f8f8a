# rx_core/schedules/exceptions.py
from __future__ import annotations

from rx_core.common.errors import DomainError, NotFoundError


class ScheduleError(DomainError):
    code = "schedule_error"


class ScheduleValidationError(ScheduleError):
    """Rejected before any write; `field` names the offending input."""
    code = "validation_error"
    http_status = 400
    default_message = "Invalid schedule data."


class ScheduleConflictError(ScheduleError):
    code = "conflict"
    http_status = 409
    default_message = "Pharmacist already has an overlapping shift."

    def __init__(self, message: str | None = None, *, conflicting_shift_ids=(), **kwargs):
        self.conflicting_shift_ids = [str(sid) for sid in conflicting_shift_ids]
        kwargs.setdefault("details", {"conflicting_shift_ids": self.conflicting_shift_ids})
        super().__init__(message, **kwargs)


class StaleShiftError(ScheduleError):
    code = "stale_shift"
    http_status = 409
    default_message = "Shift was modified by another request. Reload and retry."


class ScheduleStorageError(ScheduleError):
    code = "storage_error"
    http_status = 503
    default_message = "Schedule storage is unavailable."


class ShiftNotFound(NotFoundError):
    default_message = "Shift not found."


class PharmacistNotFound(NotFoundError):
    default_message = "Pharmacist not found."


class PharmacyNotFound(NotFoundError):
    default_message = "Pharmacy not found."
