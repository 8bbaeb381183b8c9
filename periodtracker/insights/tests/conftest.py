"""Shared fixtures for the insights engine tests."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from periodtracker.insights.records import CycleRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixed "today" so grids never depend on the wall clock
TEST_TODAY = date(2025, 4, 12)


def make_cycle(
    start: date | str | None,
    end: date | str | None,
    cycle_id: int | None = 1,
) -> CycleRecord:
    return CycleRecord.from_mapping(
        {"cycle_id": cycle_id, "start_date": start, "end_date": end}
    )


@pytest.fixture
def cycles_payload() -> list[dict]:
    """A ``GET /cycles`` response body, newest cycle first."""
    return json.loads((FIXTURES_DIR / "cycles.json").read_text())


@pytest.fixture
def cycles(cycles_payload: list[dict]) -> list[CycleRecord]:
    return [CycleRecord.from_mapping(c) for c in cycles_payload]


@pytest.fixture
def april_cycle() -> CycleRecord:
    return make_cycle(date(2025, 4, 1), date(2025, 4, 5), cycle_id=42)
