"""Queries for period cycles and the symptoms logged against them.

A cycle and its symptom list are always written together inside one
transaction.  Updates replace the symptom list wholesale.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Mapping

from periodtracker.services.database import (
    affected_rows,
    execute,
    fetchrow,
    get_connection,
)

logger = logging.getLogger("periodtracker.services.cycles")

CYCLE_COLUMNS = "cycle_id, user_id, start_date, end_date, notes, created_at"

_SYMPTOMS_FOR_CYCLES = """
    SELECT cs.cycle_id, cs.symptom_id, COALESCE(s.name, 'Unknown') AS name,
           cs.intensity, cs.date
    FROM cycle_symptoms cs
    LEFT JOIN symptoms s ON s.symptom_id = cs.symptom_id
    WHERE cs.cycle_id = ANY($1::int[])
    ORDER BY cs.cycle_id, cs.date, cs.cycle_symptom_id
"""


def clamp_symptom_date(symptom_date: date, start_date: date, end_date: date) -> date:
    """Pull ``symptom_date`` into ``[start_date, end_date]``."""
    if symptom_date < start_date:
        return start_date
    if symptom_date > end_date:
        return end_date
    return symptom_date


def _symptom_rows(
    cycle_id: int,
    start_date: date,
    end_date: date,
    symptoms: Iterable[Mapping[str, Any]],
) -> list[tuple[int, int, int, date]]:
    return [
        (
            cycle_id,
            s["symptom_id"],
            s["intensity"],
            clamp_symptom_date(s["date"], start_date, end_date),
        )
        for s in symptoms
    ]


async def _attach_symptoms(conn: Any, cycles: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if not cycles:
        return cycles
    rows = await conn.fetch(_SYMPTOMS_FOR_CYCLES, [c["cycle_id"] for c in cycles])
    by_cycle: dict[int, list[dict[str, Any]]] = {c["cycle_id"]: [] for c in cycles}
    for r in rows:
        item = dict(r)
        by_cycle[item.pop("cycle_id")].append(item)
    for cycle in cycles:
        cycle["symptoms"] = by_cycle[cycle["cycle_id"]]
    return cycles


async def list_cycles(user_id: int) -> list[dict[str, Any]]:
    """All cycles for ``user_id``, newest first, each with its symptoms."""
    async with get_connection() as conn:
        rows = await conn.fetch(
            f"SELECT {CYCLE_COLUMNS} FROM period_cycles WHERE user_id = $1 "
            "ORDER BY start_date DESC, cycle_id DESC",
            user_id,
        )
        return await _attach_symptoms(conn, [dict(r) for r in rows])


async def get_cycle(cycle_id: int) -> dict[str, Any] | None:
    """A single cycle with symptoms, regardless of owner."""
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"SELECT {CYCLE_COLUMNS} FROM period_cycles WHERE cycle_id = $1", cycle_id
        )
        if not row:
            return None
        cycles = await _attach_symptoms(conn, [dict(row)])
        return cycles[0]


async def get_cycle_owner(cycle_id: int) -> int | None:
    row = await fetchrow("SELECT user_id FROM period_cycles WHERE cycle_id = $1", cycle_id)
    return row["user_id"] if row else None


async def create_cycle(
    user_id: int,
    start_date: date,
    end_date: date,
    notes: str | None,
    symptoms: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO period_cycles (user_id, start_date, end_date, notes)
            VALUES ($1, $2, $3, $4)
            RETURNING {CYCLE_COLUMNS}
            """,
            user_id, start_date, end_date, notes,
        )
        cycle = dict(row)
        symptom_rows = _symptom_rows(cycle["cycle_id"], start_date, end_date, symptoms)
        if symptom_rows:
            await conn.executemany(
                "INSERT INTO cycle_symptoms (cycle_id, symptom_id, intensity, date) "
                "VALUES ($1, $2, $3, $4)",
                symptom_rows,
            )
        logger.info(
            "Created cycle %s for user %s with %d symptom(s)",
            cycle["cycle_id"], user_id, len(symptom_rows),
        )
        return (await _attach_symptoms(conn, [cycle]))[0]


async def update_cycle(
    cycle_id: int,
    user_id: int,
    start_date: date,
    end_date: date,
    notes: str | None,
    symptoms: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any] | None:
    """Overwrite a cycle and replace its symptom list.

    Returns ``None`` if the cycle does not exist or belongs to someone else.
    """
    async with get_connection() as conn:
        row = await conn.fetchrow(
            f"""
            UPDATE period_cycles SET start_date = $3, end_date = $4, notes = $5
            WHERE cycle_id = $1 AND user_id = $2
            RETURNING {CYCLE_COLUMNS}
            """,
            cycle_id, user_id, start_date, end_date, notes,
        )
        if not row:
            return None
        await conn.execute("DELETE FROM cycle_symptoms WHERE cycle_id = $1", cycle_id)
        symptom_rows = _symptom_rows(cycle_id, start_date, end_date, symptoms)
        if symptom_rows:
            await conn.executemany(
                "INSERT INTO cycle_symptoms (cycle_id, symptom_id, intensity, date) "
                "VALUES ($1, $2, $3, $4)",
                symptom_rows,
            )
        logger.info("Updated cycle %s (%d symptom(s))", cycle_id, len(symptom_rows))
        return (await _attach_symptoms(conn, [dict(row)]))[0]


async def delete_cycle(cycle_id: int, user_id: int) -> bool:
    """Delete an owned cycle; its symptoms cascade."""
    status = await execute(
        "DELETE FROM period_cycles WHERE cycle_id = $1 AND user_id = $2",
        cycle_id, user_id,
    )
    return affected_rows(status) == 1
