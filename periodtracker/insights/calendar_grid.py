"""Month calendar annotated with period, fertile and ovulation days.

Ovulation is placed a fixed 14 days after the period start and the fertile
window covers the five days before it plus the ovulation day itself.  This
is a population heuristic, not a personalised prediction; it ignores the
user's actual cycle length and luteal phase.

Weeks start on Monday.  ``month`` is 1-based everywhere in this module.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from periodtracker.insights.records import CycleRecord, InsightsError

logger = logging.getLogger("periodtracker.insights.calendar")

OVULATION_OFFSET_DAYS = 14
FERTILE_DAYS_BEFORE_OVULATION = 5
DAYS_PER_WEEK = 7


class InvalidMonthError(InsightsError, ValueError):
    """Raised for a year/month pair that does not name a calendar month."""


@dataclass(frozen=True)
class DayClassification:
    """Cycle status of a single date."""

    date: date
    is_period: bool = False
    is_fertile: bool = False
    is_ovulation: bool = False
    is_today: bool = False
    cycle_id: int | None = None

    @property
    def active(self) -> bool:
        return self.is_period or self.is_fertile or self.is_ovulation


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the month grid.

    Padding cells have ``date=None`` unless adjacent-month days were
    requested, in which case ``in_month`` is False.
    """

    day: int | None = None
    date: date | None = None
    in_month: bool = False
    is_period: bool = False
    is_fertile: bool = False
    is_ovulation: bool = False
    is_today: bool = False
    cycle_id: int | None = None

    @property
    def active(self) -> bool:
        return self.is_period or self.is_fertile or self.is_ovulation

    @classmethod
    def from_classification(
        cls, info: DayClassification, in_month: bool = True
    ) -> CalendarDay:
        return cls(
            day=info.date.day,
            date=info.date,
            in_month=in_month,
            is_period=info.is_period,
            is_fertile=info.is_fertile,
            is_ovulation=info.is_ovulation,
            is_today=info.is_today,
            cycle_id=info.cycle_id,
        )


@dataclass(frozen=True)
class CalendarMonth:
    """A full month grid, always a whole number of Monday-first weeks."""

    year: int
    month: int
    leading_cells: int
    days: tuple[CalendarDay, ...]

    @property
    def weeks(self) -> list[tuple[CalendarDay, ...]]:
        return [
            self.days[i : i + DAYS_PER_WEEK]
            for i in range(0, len(self.days), DAYS_PER_WEEK)
        ]


# ---------------------------------------------------------------------------
# Per-cycle heuristics
# ---------------------------------------------------------------------------


def ovulation_date(start_date: date) -> date:
    """Estimated ovulation day for a period starting on ``start_date``."""
    return start_date + timedelta(days=OVULATION_OFFSET_DAYS)


def fertile_window(start_date: date) -> tuple[date, date]:
    """Inclusive (first, last) fertile days; the last one is ovulation."""
    ovulation = ovulation_date(start_date)
    return ovulation - timedelta(days=FERTILE_DAYS_BEFORE_OVULATION), ovulation


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify_day(
    day: date,
    cycles: Iterable[CycleRecord],
    today: date | None = None,
) -> DayClassification:
    """Classify ``day`` against every cycle in ``cycles``.

    Flags accumulate over all cycles.  For ``cycle_id`` the last cycle whose
    period covers ``day`` wins; failing that, the first cycle whose fertile
    window covers it.  Overlapping cycles are not reconciled.

    Args:
        day:    Date to classify.
        cycles: Cycle snapshot, scanned in the given order.
        today:  Reference date for ``is_today``; ``None`` means never today.
    """
    is_period = is_fertile = is_ovulation = False
    cycle_id: int | None = None

    for cycle in cycles:
        if not cycle.has_valid_dates:
            continue
        if cycle.start_date <= day <= cycle.end_date:
            is_period = True
            cycle_id = cycle.cycle_id

        try:
            fertile_start, ovulation = fertile_window(cycle.start_date)
        except OverflowError:
            # Period days still count; only the estimate is out of range
            logger.warning(
                "Cycle %s: ovulation date out of range, no fertile window", cycle.cycle_id
            )
            continue

        if fertile_start <= day <= ovulation:
            is_fertile = True
        if day == ovulation:
            is_ovulation = True
            is_fertile = False

        if cycle_id is None and (is_fertile or is_ovulation):
            cycle_id = cycle.cycle_id

    return DayClassification(
        date=day,
        is_period=is_period,
        is_fertile=is_fertile,
        is_ovulation=is_ovulation,
        is_today=today is not None and day == today,
        cycle_id=cycle_id,
    )


def leading_cell_count(year: int, month: int) -> int:
    """Blank cells before the 1st when weeks start on Monday."""
    return date(year, month, 1).weekday()


def build_month_grid(
    year: int,
    month: int,
    cycles: Iterable[CycleRecord],
    today: date | None = None,
    include_adjacent: bool = False,
) -> CalendarMonth:
    """Build the annotated grid for ``year``/``month`` (1 = January).

    Args:
        year:             Four-digit year.
        month:            1-12.
        cycles:           Cycle snapshot; not modified.
        today:            Reference date for ``is_today`` (defaults to the
                          current local date).
        include_adjacent: Fill padding cells with the neighbouring months'
                          dates (classified too) instead of blanks.

    Raises:
        InvalidMonthError: If ``month`` is outside 1-12 or ``year`` is outside
            the range ``datetime.date`` supports.
    """
    if not 1 <= month <= 12:
        raise InvalidMonthError(f"Month must be between 1 and 12, got {month}")
    if not date.min.year <= year <= date.max.year:
        raise InvalidMonthError(f"Year out of range: {year}")

    today = today or date.today()
    snapshot = list(cycles)
    first = date(year, month, 1)
    days_in_month = calendar.monthrange(year, month)[1]
    leading = leading_cell_count(year, month)
    total = -(-(leading + days_in_month) // DAYS_PER_WEEK) * DAYS_PER_WEEK

    cells: list[CalendarDay] = []
    for offset in range(-leading, total - leading):
        in_month = 0 <= offset < days_in_month
        if not in_month and not include_adjacent:
            cells.append(CalendarDay())
            continue
        try:
            current = first + timedelta(days=offset)
        except OverflowError:
            cells.append(CalendarDay())
            continue
        info = classify_day(current, snapshot, today=today)
        cells.append(CalendarDay.from_classification(info, in_month=in_month))

    logger.debug(
        "Built %04d-%02d grid: %d cells, %d active",
        year,
        month,
        len(cells),
        sum(1 for c in cells if c.active),
    )
    return CalendarMonth(year=year, month=month, leading_cells=leading, days=tuple(cells))


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move ``delta`` months forward (or back) from ``year``/``month``."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
