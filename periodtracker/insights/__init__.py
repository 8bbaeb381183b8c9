"""Cycle statistics and calendar annotation.

Pure, synchronous functions over an already-fetched snapshot of a user's
cycles.  Nothing here touches the database or mutates its input; callers
recompute from scratch whenever the cycle list changes.

Modules:
    records        - Frozen cycle/symptom snapshots and date parsing
    statistics     - Average period length and average cycle length
    calendar_grid  - Period / fertile / ovulation classification per day
"""

from periodtracker.insights.calendar_grid import (
    CalendarDay,
    CalendarMonth,
    DayClassification,
    InvalidMonthError,
    build_month_grid,
    classify_day,
    fertile_window,
    ovulation_date,
    shift_month,
)
from periodtracker.insights.records import (
    CycleRecord,
    InsightsError,
    SymptomOccurrence,
    parse_iso_date,
    to_records,
)
from periodtracker.insights.statistics import CycleStatistics, calculate_cycle_statistics

__all__ = [
    "CalendarDay",
    "CalendarMonth",
    "CycleRecord",
    "CycleStatistics",
    "DayClassification",
    "InsightsError",
    "InvalidMonthError",
    "SymptomOccurrence",
    "build_month_grid",
    "calculate_cycle_statistics",
    "classify_day",
    "fertile_window",
    "ovulation_date",
    "parse_iso_date",
    "shift_month",
    "to_records",
]
