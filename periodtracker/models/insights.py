"""Response models for the statistics and calendar endpoints."""

from __future__ import annotations

import datetime as dt

from periodtracker.models.base import TrackerBase


class CycleStatisticsRead(TrackerBase):
    average_period_length_days: int | None = None
    average_cycle_length_days: int | None = None
    cycles_analyzed: int = 0


class CalendarDayRead(TrackerBase):
    day: int | None = None
    date: dt.date | None = None
    in_month: bool = False
    active: bool = False
    is_period: bool = False
    is_fertile: bool = False
    is_ovulation: bool = False
    is_today: bool = False
    cycle_id: int | None = None


class MonthRef(TrackerBase):
    year: int
    month: int


class CalendarMonthRead(TrackerBase):
    year: int
    month: int  # 1 = January
    leading_cells: int
    week_starts_on: str = "monday"
    days: list[CalendarDayRead]
    previous: MonthRef | None = None
    next: MonthRef | None = None
