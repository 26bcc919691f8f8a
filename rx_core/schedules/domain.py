# rx_core/schedules/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional
from uuid import UUID

from rx_core.pharmacies.directory import PharmacistProfile
from rx_core.schedules.constants import ShiftStatus, WorkType


@dataclass(frozen=True)
class ShiftRecord:
    """
    Plain shift data exchanged between the scheduling core and repositories.
    `id`, `created_at` and `updated_at` are None until persisted.
    """
    pharmacist_id: UUID
    pharmacy_id: UUID
    schedule_date: date
    start_time: time
    end_time: time
    break_minutes: int = 0
    work_type: str = WorkType.REGULAR
    status: str = ShiftStatus.SCHEDULED
    work_location: Optional[str] = None
    work_description: Optional[str] = None
    created_by_id: Optional[int] = None
    id: Optional[UUID] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status != ShiftStatus.CANCELLED


@dataclass(frozen=True)
class ShiftChangeRecord:
    """
    One audit entry. `id`, `sequence` and `created_at` are assigned by the log.
    """
    shift_id: UUID
    change_type: str
    changed_by_id: Optional[int] = None
    reason: Optional[str] = None
    previous_values: dict[str, Any] = field(default_factory=dict)
    new_values: dict[str, Any] = field(default_factory=dict)
    substitute_requested: bool = False
    suggested_pharmacist_id: Optional[UUID] = None
    suggestion_accepted: Optional[bool] = None
    id: Optional[UUID] = None
    sequence: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ShiftChange:
    """
    Result of a mutating schedule operation.

    `event` is None for no-op updates and when the history append failed;
    in the latter case `history_error` holds the failure.
    """
    shift: ShiftRecord
    event: Optional[ShiftChangeRecord] = None
    history_error: Optional[Exception] = None

    @property
    def audit_diverged(self) -> bool:
        return self.history_error is not None


@dataclass(frozen=True)
class SubstituteCandidate:
    pharmacist: PharmacistProfile
    score: float
    shared_specialty_count: int
    experience_gap: int
    label: str


@dataclass(frozen=True)
class ShiftStats:
    pharmacist_id: UUID
    start_date: date
    end_date: date
    total_shifts: int
    completed_shifts: int
    cancelled_shifts: int
    total_hours: float
    average_hours_per_shift: float
