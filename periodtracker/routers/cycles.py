"""CRUD endpoints for period cycles and their logged symptoms."""

from __future__ import annotations

from typing import Any

import asyncpg
from fastapi import APIRouter, HTTPException

from periodtracker.dependencies import CurrentUser
from periodtracker.models.cycles import CycleCreate, CycleRead, CycleUpdate
from periodtracker.services import cycles as cycle_service
from periodtracker.services import symptoms as symptom_service

router = APIRouter(prefix="/cycles", tags=["cycles"])

SYMPTOM_FK = "cycle_symptoms_symptom_id_fkey"


async def _validate_body(body: CycleCreate) -> None:
    if body.end_date < body.start_date:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")

    requested = {s.symptom_id for s in body.symptoms}
    if not requested:
        return
    unknown = requested - await symptom_service.existing_symptom_ids(sorted(requested))
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown symptom id(s): {', '.join(str(i) for i in sorted(unknown))}",
        )


@router.get("", response_model=list[CycleRead])
async def list_cycles(user: CurrentUser) -> Any:
    """All of the caller's cycles, newest first."""
    return await cycle_service.list_cycles(user.user_id)


@router.get("/{cycle_id}", response_model=CycleRead)
async def get_cycle(cycle_id: int, user: CurrentUser) -> Any:
    cycle = await cycle_service.get_cycle(cycle_id)
    if not cycle:
        raise HTTPException(status_code=404, detail="Cycle not found")
    if cycle["user_id"] != user.user_id:
        raise HTTPException(status_code=403, detail="You can only access your own cycles")
    return cycle


@router.post("", response_model=CycleRead, status_code=201)
async def create_cycle(user: CurrentUser, body: CycleCreate) -> Any:
    await _validate_body(body)
    try:
        return await cycle_service.create_cycle(
            user.user_id,
            body.start_date,
            body.end_date,
            body.notes,
            [s.model_dump() for s in body.symptoms],
        )
    except asyncpg.ForeignKeyViolationError as exc:
        if getattr(exc, "constraint_name", None) == SYMPTOM_FK:
            raise HTTPException(status_code=400, detail="Unknown symptom id")
        # Account deleted while its token was still in use
        raise HTTPException(status_code=401, detail="User no longer exists")


@router.put("/{cycle_id}", response_model=CycleRead)
async def update_cycle(cycle_id: int, user: CurrentUser, body: CycleUpdate) -> Any:
    """Replace a cycle's dates, notes and full symptom list."""
    owner = await cycle_service.get_cycle_owner(cycle_id)
    if owner is None:
        raise HTTPException(status_code=404, detail="Cycle not found")
    if owner != user.user_id:
        raise HTTPException(status_code=403, detail="You can only modify your own cycles")
    await _validate_body(body)

    cycle = await cycle_service.update_cycle(
        cycle_id,
        user.user_id,
        body.start_date,
        body.end_date,
        body.notes,
        [s.model_dump() for s in body.symptoms],
    )
    if not cycle:
        # Deleted between the ownership check and the update
        raise HTTPException(status_code=404, detail="Cycle not found")
    return cycle


@router.delete("/{cycle_id}", status_code=204)
async def delete_cycle(cycle_id: int, user: CurrentUser) -> None:
    owner = await cycle_service.get_cycle_owner(cycle_id)
    if owner is None:
        raise HTTPException(status_code=404, detail="Cycle not found")
    if owner != user.user_id:
        raise HTTPException(status_code=403, detail="You can only delete your own cycles")
    if not await cycle_service.delete_cycle(cycle_id, user.user_id):
        raise HTTPException(status_code=404, detail="Cycle not found")
