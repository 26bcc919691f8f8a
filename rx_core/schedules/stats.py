# rx_core/schedules/stats.py
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from rx_core.schedules.constants import ShiftStatus
from rx_core.schedules.domain import ShiftStats
from rx_core.schedules.exceptions import ScheduleValidationError
from rx_core.schedules.repositories import DjangoShiftRepository, ShiftRepository, storage_call
from rx_core.schedules.timerange import worked_hours


class ScheduleStatistics:
    """
    Per-pharmacist roll-up over an inclusive date range.

    Cancelled shifts are included in the totals; `cancelled_shifts` is
    reported so callers can discount them.
    """

    def __init__(self, shifts: Optional[ShiftRepository] = None):
        self.shifts = shifts or DjangoShiftRepository()

    def stats(self, pharmacist_id: UUID, start_date: date, end_date: date) -> ShiftStats:
        if end_date < start_date:
            raise ScheduleValidationError("end_date must not be before start_date.", field="end_date")

        with storage_call("load shift statistics"):
            shifts = self.shifts.find_by_date_range(start_date, end_date, pharmacist_id=pharmacist_id)

        total_shifts = len(shifts)
        total_hours = sum(worked_hours(s) for s in shifts)

        return ShiftStats(
            pharmacist_id=pharmacist_id,
            start_date=start_date,
            end_date=end_date,
            total_shifts=total_shifts,
            completed_shifts=sum(1 for s in shifts if s.status == ShiftStatus.COMPLETED),
            cancelled_shifts=sum(1 for s in shifts if s.status == ShiftStatus.CANCELLED),
            total_hours=float(total_hours),
            average_hours_per_shift=total_hours / total_shifts if total_shifts else 0.0,
        )
