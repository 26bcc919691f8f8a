# rx_core/schedules/periods.py
"""
Calendar windows used by the day / week / month views.
Weeks run Sunday to Saturday.
"""
from __future__ import annotations

import calendar
from datetime import date, timedelta

VIEWS = ("day", "week", "month")


def day_range(day: date) -> tuple[date, date]:
    return day, day


def week_range(day: date) -> tuple[date, date]:
    # date.weekday(): Monday=0 .. Sunday=6
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_range(year: int, month: int) -> tuple[date, date]:
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def view_range(view: str, anchor: date) -> tuple[date, date]:
    if view == "day":
        return day_range(anchor)
    if view == "week":
        return week_range(anchor)
    if view == "month":
        return month_range(anchor.year, anchor.month)
    raise ValueError(f"Unknown calendar view '{view}'. Expected one of {VIEWS}.")
