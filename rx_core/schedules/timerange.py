# rx_core/schedules/timerange.py
"""
Pure helpers for same-day wall-clock intervals.

Intervals are half-open: [start, end). Two shifts that merely touch
(one ends at 13:00, the next starts at 13:00) do not overlap.
"""
from __future__ import annotations

from datetime import time

from rx_core.schedules.exceptions import ScheduleValidationError


def _minutes(t: time) -> float:
    return t.hour * 60 + t.minute + t.second / 60


def overlaps(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    return a_start < b_end and b_start < a_end


def duration_minutes(start: time, end: time) -> float:
    return _minutes(end) - _minutes(start)


def validate_window(start: time | None, end: time | None, break_minutes: int | None = 0) -> None:
    if start is None:
        raise ScheduleValidationError("Start time is required.", field="start_time")
    if end is None:
        raise ScheduleValidationError("End time is required.", field="end_time")
    if end <= start:
        raise ScheduleValidationError("End time must be after start time.", field="end_time")

    if break_minutes is None:
        return
    if break_minutes < 0:
        raise ScheduleValidationError("Break duration cannot be negative.", field="break_minutes")
    if break_minutes >= duration_minutes(start, end):
        raise ScheduleValidationError(
            "Break duration must be shorter than the shift.",
            field="break_minutes",
        )


def worked_hours(shift) -> float:
    """
    (end - start) - break, in hours. Anything at or below zero is corrupt data.
    """
    minutes = duration_minutes(shift.start_time, shift.end_time) - shift.break_minutes
    if minutes <= 0:
        raise ScheduleValidationError(
            f"Shift {shift.id} has no worked time (check times and break).",
            field="break_minutes",
        )
    return minutes / 60
