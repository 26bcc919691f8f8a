# rx_core/schedules/tests/test_timerange.py
from datetime import time
from types import SimpleNamespace

import pytest

from rx_core.schedules.exceptions import ScheduleValidationError
from rx_core.schedules.timerange import duration_minutes, overlaps, validate_window, worked_hours


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((time(9), time(13)), (time(12), time(17)), True),
        ((time(9), time(17)), (time(10), time(11)), True),
        ((time(9), time(13)), (time(13), time(17)), False),
        ((time(9), time(10)), (time(15), time(16)), False),
        ((time(9), time(17)), (time(9), time(17)), True),
    ],
)
def test_overlaps_is_half_open_and_symmetric(a, b, expected):
    assert overlaps(*a, *b) is expected
    assert overlaps(*b, *a) is expected


def test_duration_minutes_counts_partial_hours():
    assert duration_minutes(time(9, 15), time(17, 45)) == 510


def test_validate_window_accepts_normal_shift():
    validate_window(time(9), time(18), 60)


def test_validate_window_rejects_end_not_after_start():
    with pytest.raises(ScheduleValidationError) as exc:
        validate_window(time(18), time(9))
    assert exc.value.field == "end_time"

    with pytest.raises(ScheduleValidationError):
        validate_window(time(9), time(9))


def test_validate_window_rejects_missing_times():
    with pytest.raises(ScheduleValidationError) as exc:
        validate_window(None, time(9))
    assert exc.value.field == "start_time"


@pytest.mark.parametrize("break_minutes", [-1, 60, 90])
def test_validate_window_rejects_bad_break(break_minutes):
    with pytest.raises(ScheduleValidationError) as exc:
        validate_window(time(9), time(10), break_minutes)
    assert exc.value.field == "break_minutes"


def test_validate_window_can_skip_break_check():
    validate_window(time(9), time(10), break_minutes=None)


def test_worked_hours_subtracts_break():
    shift = SimpleNamespace(id="s1", start_time=time(9), end_time=time(18), break_minutes=60)
    assert worked_hours(shift) == 8.0


def test_worked_hours_rejects_zero_worked_time():
    shift = SimpleNamespace(id="s1", start_time=time(9), end_time=time(10), break_minutes=60)
    with pytest.raises(ScheduleValidationError):
        worked_hours(shift)
