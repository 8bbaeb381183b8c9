"""Immutable cycle snapshots consumed by the insights engine.

The API hands the engine rows fetched from Postgres (``date`` objects) while
clients replaying a ``GET /cycles`` payload hand it ISO ``YYYY-MM-DD``
strings.  Both are normalised here into frozen records; a date that cannot
be parsed becomes ``None`` and the owning cycle is later skipped rather than
failing the whole computation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping

logger = logging.getLogger("periodtracker.insights.records")


class InsightsError(Exception):
    """Base class for errors raised by the insights engine."""


def parse_iso_date(value: Any) -> date | None:
    """Coerce a date-ish value to a ``date``.

    Accepts ``date``, ``datetime`` (time part dropped) and ISO strings
    (``2025-04-01`` or ``2025-04-01T00:00:00``).  Anything else, including
    malformed strings, yields ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class SymptomOccurrence:
    """A logged symptom tied to a cycle.

    Attributes:
        symptom_id: Reference to the symptom definition.
        intensity:  1 (barely noticeable) to 5 (severe).
        date:       Day the symptom was experienced.
        name:       Display name joined from the definition.
    """

    symptom_id: int
    intensity: int
    date: date | None
    name: str = "Unknown"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SymptomOccurrence:
        return cls(
            symptom_id=int(data["symptom_id"]),
            intensity=int(data["intensity"]),
            date=parse_iso_date(data.get("date")),
            name=data.get("name") or "Unknown",
        )


@dataclass(frozen=True)
class CycleRecord:
    """One recorded period.

    Attributes:
        cycle_id:   Database id (``None`` for unsaved drafts).
        start_date: First day of bleeding.
        end_date:   Last day of bleeding, inclusive.
        user_id:    Owner.
        notes:      Free text.
        symptoms:   Symptom occurrences ordered by date.
    """

    cycle_id: int | None
    start_date: date | None
    end_date: date | None
    user_id: int | None = None
    notes: str | None = None
    symptoms: tuple[SymptomOccurrence, ...] = ()

    @property
    def has_valid_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CycleRecord:
        """Build a record from an API payload or a database row."""
        start = parse_iso_date(data.get("start_date"))
        end = parse_iso_date(data.get("end_date"))
        if start is None or end is None:
            logger.warning(
                "Cycle %s has an unparsable date (start=%r, end=%r)",
                data.get("cycle_id"),
                data.get("start_date"),
                data.get("end_date"),
            )
        return cls(
            cycle_id=data.get("cycle_id"),
            start_date=start,
            end_date=end,
            user_id=data.get("user_id"),
            notes=data.get("notes"),
            symptoms=tuple(
                SymptomOccurrence.from_mapping(s) for s in data.get("symptoms") or ()
            ),
        )


def to_records(rows: Iterable[CycleRecord | Mapping[str, Any]]) -> list[CycleRecord]:
    """Normalise a mixed iterable of records and mappings into a new list."""
    return [
        row if isinstance(row, CycleRecord) else CycleRecord.from_mapping(row)
        for row in rows
    ]


def usable_cycles(cycles: Iterable[CycleRecord]) -> list[CycleRecord]:
    """Drop cycles whose start or end date is missing."""
    usable = []
    for cycle in cycles:
        if not cycle.has_valid_dates:
            logger.warning("Skipping cycle %s: invalid dates", cycle.cycle_id)
            continue
        usable.append(cycle)
    return usable
