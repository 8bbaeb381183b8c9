"""Pydantic models for cycles, logged symptoms and the symptom catalogue."""

from __future__ import annotations

import datetime as dt

from pydantic import Field, computed_field

from periodtracker.models.base import TrackerBase


# ---------- Symptom catalogue ----------

class SymptomRead(TrackerBase):
    symptom_id: int
    name: str
    icon: str | None = None


# ---------- Logged symptoms ----------

class CycleSymptomIn(TrackerBase):
    symptom_id: int = Field(gt=0)
    intensity: int = Field(ge=1, le=5)
    date: dt.date


class CycleSymptomRead(TrackerBase):
    symptom_id: int
    name: str = "Unknown"
    intensity: int
    date: dt.date


# ---------- Cycles ----------

class CycleBase(TrackerBase):
    start_date: dt.date
    end_date: dt.date
    notes: str | None = Field(default=None, max_length=2000)


class CycleCreate(CycleBase):
    symptoms: list[CycleSymptomIn] = Field(default_factory=list)


class CycleUpdate(CycleCreate):
    """Full replacement: dates, notes and the complete symptom list."""


class CycleRead(CycleBase):
    cycle_id: int
    user_id: int
    created_at: dt.datetime | None = None
    symptoms: list[CycleSymptomRead] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def period_length_days(self) -> int:
        return (self.end_date - self.start_date).days + 1
