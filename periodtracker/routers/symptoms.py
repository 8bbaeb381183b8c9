"""Symptom catalogue: public, read-only reference data."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from periodtracker.models.cycles import SymptomRead
from periodtracker.services import symptoms as symptom_service

router = APIRouter(prefix="/symptoms", tags=["symptoms"])


@router.get("", response_model=list[SymptomRead])
async def list_symptoms() -> Any:
    return await symptom_service.list_symptoms()
