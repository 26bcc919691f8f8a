# rx_core/schedules/constants.py
from django.db import models


class ShiftStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    CONFIRMED = "confirmed", "Confirmed"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class WorkType(models.TextChoices):
    REGULAR = "regular", "Regular"
    OVERTIME = "overtime", "Overtime"
    HOLIDAY = "holiday", "Holiday"
    EMERGENCY = "emergency", "Emergency"


class ChangeType(models.TextChoices):
    UPDATE = "update", "Update"
    CANCEL = "cancel", "Cancel"
    RESCHEDULE = "reschedule", "Reschedule"
    SUBSTITUTE = "substitute", "Substitute"


# Forward-only status graph. Reschedule/substitute never touch status.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    ShiftStatus.SCHEDULED: frozenset({ShiftStatus.CONFIRMED, ShiftStatus.COMPLETED, ShiftStatus.CANCELLED}),
    ShiftStatus.CONFIRMED: frozenset({ShiftStatus.COMPLETED, ShiftStatus.CANCELLED}),
    ShiftStatus.COMPLETED: frozenset(),
    ShiftStatus.CANCELLED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({ShiftStatus.SCHEDULED, ShiftStatus.CONFIRMED})
