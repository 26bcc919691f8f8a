# rx_core/schedules/tests/test_stats.py
import uuid
from datetime import date, time

import pytest

from rx_core.schedules.constants import ShiftStatus
from rx_core.schedules.domain import ShiftRecord
from rx_core.schedules.exceptions import ScheduleValidationError
from rx_core.schedules.stats import ScheduleStatistics
from rx_core.schedules.tests.fakes import InMemoryShiftRepository

PHARMACIST = uuid.uuid4()
PHARMACY = uuid.uuid4()


def _shift(day, start, end, *, break_minutes=0, status=ShiftStatus.SCHEDULED, pharmacist_id=PHARMACIST):
    return ShiftRecord(
        pharmacist_id=pharmacist_id,
        pharmacy_id=PHARMACY,
        schedule_date=day,
        start_time=start,
        end_time=end,
        break_minutes=break_minutes,
        status=status,
    )


def test_stats_roll_up_hours_and_statuses():
    repo = InMemoryShiftRepository(
        [
            _shift(date(2024, 4, 1), time(9), time(18), break_minutes=60, status=ShiftStatus.COMPLETED),
            _shift(date(2024, 4, 2), time(9), time(13), status=ShiftStatus.CANCELLED),
            _shift(date(2024, 4, 3), time(13), time(19)),
            # outside the range / someone else
            _shift(date(2024, 5, 1), time(9), time(17)),
            _shift(date(2024, 4, 2), time(9), time(17), pharmacist_id=uuid.uuid4()),
        ]
    )

    stats = ScheduleStatistics(repo).stats(PHARMACIST, date(2024, 4, 1), date(2024, 4, 30))

    assert stats.total_shifts == 3
    assert stats.completed_shifts == 1
    assert stats.cancelled_shifts == 1
    assert stats.total_hours == 18.0
    assert stats.average_hours_per_shift == 6.0


def test_stats_without_shifts_is_all_zero():
    stats = ScheduleStatistics(InMemoryShiftRepository()).stats(PHARMACIST, date(2024, 4, 1), date(2024, 4, 30))

    assert stats.total_shifts == 0
    assert stats.total_hours == 0.0
    assert stats.average_hours_per_shift == 0.0


def test_stats_rejects_inverted_range():
    with pytest.raises(ScheduleValidationError):
        ScheduleStatistics(InMemoryShiftRepository()).stats(PHARMACIST, date(2024, 4, 2), date(2024, 4, 1))


def test_stats_surfaces_corrupt_shift():
    repo = InMemoryShiftRepository([_shift(date(2024, 4, 1), time(9), time(10), break_minutes=60)])

    with pytest.raises(ScheduleValidationError):
        ScheduleStatistics(repo).stats(PHARMACIST, date(2024, 4, 1), date(2024, 4, 1))
