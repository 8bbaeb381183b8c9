"""Read-only access to the symptom catalogue."""

from __future__ import annotations

from typing import Any

from periodtracker.services.database import fetch, fetchval


async def list_symptoms() -> list[dict[str, Any]]:
    rows = await fetch("SELECT symptom_id, name, icon FROM symptoms ORDER BY symptom_id")
    return [dict(r) for r in rows]


async def existing_symptom_ids(symptom_ids: list[int]) -> set[int]:
    """Subset of ``symptom_ids`` that exist in the catalogue."""
    if not symptom_ids:
        return set()
    found = await fetchval(
        "SELECT COALESCE(array_agg(symptom_id), '{}') FROM symptoms WHERE symptom_id = ANY($1::int[])",
        symptom_ids,
    )
    return set(found)
