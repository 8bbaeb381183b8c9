"""Average period length and average cycle length.

Period length is inclusive of both boundary days.  Cycle length is the gap
between consecutive start dates once the cycles are sorted oldest first;
two cycles that share a start date contribute a zero-day gap.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from periodtracker.insights.records import CycleRecord, usable_cycles

logger = logging.getLogger("periodtracker.insights.statistics")


@dataclass(frozen=True)
class CycleStatistics:
    """Summary shown on the dashboard.

    Attributes:
        average_period_length_days: ``None`` when no cycle has usable dates.
        average_cycle_length_days:  ``None`` when fewer than two cycles do.
        cycles_analyzed:            Number of cycles that fed the averages.
    """

    average_period_length_days: int | None = None
    average_cycle_length_days: int | None = None
    cycles_analyzed: int = 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def period_length_days(cycle: CycleRecord) -> int:
    """Number of bleeding days in ``cycle``, counting start and end."""
    if not cycle.has_valid_dates:
        raise ValueError(f"Cycle {cycle.cycle_id} has no usable dates")
    return (cycle.end_date - cycle.start_date).days + 1


def cycle_intervals_days(cycles: Iterable[CycleRecord]) -> list[int]:
    """Days between consecutive start dates, oldest cycle first."""
    ordered = sorted(usable_cycles(cycles), key=lambda c: c.start_date)
    return [
        (current.start_date - previous.start_date).days
        for previous, current in zip(ordered, ordered[1:])
    ]


def calculate_cycle_statistics(cycles: Iterable[CycleRecord]) -> CycleStatistics:
    """Compute the dashboard averages over a snapshot of cycles.

    The input is never mutated; cycles with invalid dates are ignored.

    Args:
        cycles: Cycle records in any order.

    Returns:
        CycleStatistics with ``None`` for averages that cannot be measured.
    """
    usable = usable_cycles(cycles)
    if not usable:
        return CycleStatistics()

    lengths = [period_length_days(c) for c in usable]
    avg_period = round_half_up(sum(lengths) / len(lengths))

    if len(usable) < 2:
        return CycleStatistics(
            average_period_length_days=avg_period,
            cycles_analyzed=len(usable),
        )

    intervals = cycle_intervals_days(usable)
    if 0 in intervals:
        logger.info(
            "Duplicate cycle start dates found; counting %d zero-day interval(s)",
            intervals.count(0),
        )
    avg_cycle = round_half_up(sum(intervals) / len(intervals))

    return CycleStatistics(
        average_period_length_days=avg_period,
        average_cycle_length_days=avg_cycle,
        cycles_analyzed=len(usable),
    )
