"""Cycle statistics and the annotated month calendar.

Both endpoints read the caller's full cycle history and run the pure
functions from ``periodtracker.insights`` over it; nothing is cached.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from periodtracker.dependencies import CurrentUser
from periodtracker.insights import (
    InvalidMonthError,
    build_month_grid,
    calculate_cycle_statistics,
    classify_day,
    shift_month,
    to_records,
)
from periodtracker.models.insights import (
    CalendarDayRead,
    CalendarMonthRead,
    CycleStatisticsRead,
    MonthRef,
)
from periodtracker.services import cycles as cycle_service

router = APIRouter(prefix="/insights", tags=["insights"])


def _month_ref(year: int, month: int, delta: int) -> MonthRef | None:
    y, m = shift_month(year, month, delta)
    if not date.min.year <= y <= date.max.year:
        return None
    return MonthRef(year=y, month=m)


@router.get("/statistics", response_model=CycleStatisticsRead)
async def get_statistics(user: CurrentUser) -> Any:
    """Average period length and average gap between period starts."""
    rows = await cycle_service.list_cycles(user.user_id)
    stats = calculate_cycle_statistics(to_records(rows))
    return CycleStatisticsRead.model_validate(stats)


@router.get("/calendar", response_model=CalendarMonthRead)
async def get_calendar(
    user: CurrentUser,
    year: int | None = Query(default=None),
    month: int | None = Query(default=None, description="1 = January"),
    include_adjacent: bool = Query(default=False),
) -> Any:
    """Monday-first month grid with period, fertile and ovulation flags.

    Defaults to the current month.
    """
    today = date.today()
    year = today.year if year is None else year
    month = today.month if month is None else month

    cycles = to_records(await cycle_service.list_cycles(user.user_id))
    try:
        grid = build_month_grid(
            year, month, cycles, today=today, include_adjacent=include_adjacent
        )
    except InvalidMonthError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return CalendarMonthRead(
        year=grid.year,
        month=grid.month,
        leading_cells=grid.leading_cells,
        days=[CalendarDayRead.model_validate(cell) for cell in grid.days],
        previous=_month_ref(year, month, -1),
        next=_month_ref(year, month, 1),
    )


@router.get("/days/{day}", response_model=CalendarDayRead)
async def get_day(day: date, user: CurrentUser) -> Any:
    """Classification of a single date."""
    cycles = to_records(await cycle_service.list_cycles(user.user_id))
    info = classify_day(day, cycles, today=date.today())
    return CalendarDayRead(
        day=info.date.day,
        date=info.date,
        in_month=True,
        active=info.active,
        is_period=info.is_period,
        is_fertile=info.is_fertile,
        is_ovulation=info.is_ovulation,
        is_today=info.is_today,
        cycle_id=info.cycle_id,
    )
