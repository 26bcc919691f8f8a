# rx_core/schedules/conflicts.py
from __future__ import annotations

from datetime import date, time
from typing import Optional
from uuid import UUID

from rx_core.schedules.domain import ShiftRecord
from rx_core.schedules.repositories import DjangoShiftRepository, ShiftRepository, storage_call
from rx_core.schedules.timerange import overlaps


class ConflictDetector:
    """
    Double-booking checks. Cancelled shifts never conflict.
    """

    def __init__(self, shifts: Optional[ShiftRepository] = None):
        self.shifts = shifts or DjangoShiftRepository()

    def find_conflicts(
        self,
        pharmacist_id: UUID,
        on_date: date,
        start: time,
        end: time,
        exclude_shift_id: Optional[UUID] = None,
    ) -> list[ShiftRecord]:
        with storage_call("check shift conflicts"):
            same_day = self.shifts.find_by_date_range(on_date, on_date, pharmacist_id=pharmacist_id)

        return [
            s
            for s in same_day
            if s.is_active
            and s.id != exclude_shift_id
            and overlaps(s.start_time, s.end_time, start, end)
        ]

    def has_conflict(
        self,
        pharmacist_id: UUID,
        on_date: date,
        start: time,
        end: time,
        exclude_shift_id: Optional[UUID] = None,
    ) -> bool:
        return bool(self.find_conflicts(pharmacist_id, on_date, start, end, exclude_shift_id))

    def busy_pharmacist_ids(self, on_date: date, start: time, end: time) -> set[UUID]:
        """
        Pharmacists with an active shift overlapping the window, across all pharmacies.
        One range query instead of one per pharmacist.
        """
        with storage_call("check shift conflicts"):
            same_day = self.shifts.find_by_date_range(on_date, on_date)

        return {
            s.pharmacist_id
            for s in same_day
            if s.is_active and overlaps(s.start_time, s.end_time, start, end)
        }
