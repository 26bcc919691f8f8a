# rx_core/schedules/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from rx_core.common.models import UUIDModel
from rx_core.pharmacies.models import Pharmacist, Pharmacy
from rx_core.schedules.constants import ChangeType, ShiftStatus, WorkType


class Shift(UUIDModel):
    """
    One pharmacist's assignment to one working block ("schedule" in the UI).
    """
    pharmacist = models.ForeignKey(Pharmacist, on_delete=models.PROTECT, related_name="shifts")
    pharmacy = models.ForeignKey(Pharmacy, on_delete=models.PROTECT, related_name="shifts")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="created_shifts",
        null=True,
        blank=True,
    )

    schedule_date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    break_minutes = models.PositiveIntegerField(default=0)

    work_type = models.CharField(max_length=16, choices=WorkType.choices, default=WorkType.REGULAR)
    status = models.CharField(
        max_length=16,
        choices=ShiftStatus.choices,
        default=ShiftStatus.SCHEDULED,
        db_index=True,
    )

    # NULL means "not provided"
    work_location = models.CharField(max_length=255, null=True, blank=True)
    work_description = models.TextField(null=True, blank=True)

    # Optimistic concurrency stamp, bumped on every mutation
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "schedules_shift"
        indexes = [
            models.Index(fields=["pharmacist", "schedule_date"], name="shift_pharmacist_date_idx"),
            models.Index(fields=["pharmacy", "schedule_date"], name="shift_pharmacy_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(end_time__gt=F("start_time")), name="ck_shift_end_after_start"),
            models.CheckConstraint(condition=Q(break_minutes__gte=0), name="ck_shift_break_non_negative"),
        ]

    def __str__(self) -> str:
        return f"Shift({self.pharmacist_id}, {self.schedule_date} {self.start_time}-{self.end_time}, {self.status})"


class ShiftChangeEvent(models.Model):
    """
    Immutable history stream for a shift.
    History views must ONLY read from this table.

    shift_id is a plain UUID so the trail survives deletion of an erroneous shift.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    shift_id = models.UUIDField(db_index=True)
    # 1-based position within the shift's trail
    sequence = models.PositiveIntegerField()
    change_type = models.CharField(max_length=16, choices=ChangeType.choices, db_index=True)

    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="shift_changes",
        null=True,
        blank=True,
    )
    reason = models.TextField(null=True, blank=True)

    previous_values = models.JSONField(default=dict, blank=True)
    new_values = models.JSONField(default=dict, blank=True)

    substitute_requested = models.BooleanField(default=False)
    suggested_pharmacist_id = models.UUIDField(null=True, blank=True)
    suggestion_accepted = models.BooleanField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "schedules_shift_change_event"
        indexes = [
            models.Index(fields=["shift_id", "created_at"], name="shift_change_shift_time_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["shift_id", "sequence"], name="uq_shift_change_sequence"),
        ]

    def __str__(self) -> str:
        return f"{self.change_type} @ {self.created_at}"

    def save(self, *args, **kwargs):
        # UUID PK exists even before first save, so use _state.adding
        if not self._state.adding:
            raise ValidationError("ShiftChangeEvent is immutable and cannot be modified once created.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("ShiftChangeEvent is immutable and cannot be deleted.")
