"""Health check endpoint. Public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from periodtracker.config import get_settings
from periodtracker.services import database

router = APIRouter(tags=["system"])
logger = logging.getLogger("periodtracker.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe with a lightweight DB round trip.

    Always 200; ``status`` drops to ``degraded`` when the pool is missing
    or the database does not answer.
    """
    settings = get_settings()
    db_ok = False
    try:
        await database.fetchval("SELECT 1")
        db_ok = True
    except Exception as exc:
        logger.warning("Health check DB probe failed: %s", exc)

    return {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected" if db_ok else "unreachable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
