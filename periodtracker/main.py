"""Period Tracker API - FastAPI application entry point.

Run locally:
    uvicorn periodtracker.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from periodtracker.config import Settings, get_settings
from periodtracker.middleware.auth import AuthMiddleware
from periodtracker.middleware.rate_limit import RateLimitMiddleware
from periodtracker.middleware.security import SecurityHeadersMiddleware
from periodtracker.routers import auth, cycles, health, insights, symptoms, users
from periodtracker.services.database import apply_schema, close_pool, init_pool

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("periodtracker")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting %s v%s [%s]",
        settings.app_name,
        settings.app_version,
        settings.environment,
    )
    await init_pool(settings)
    if settings.apply_schema_on_startup:
        await apply_schema()
    yield
    await close_pool()
    logger.info("%s shut down", settings.app_name)


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description=(
            "Menstrual cycle tracking: period logging with symptoms, "
            "cycle statistics and a fertility calendar."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (each add_middleware wraps the ones before it) ----------
    # Request path: CORS -> security headers -> rate limit -> auth -> routes

    app.add_middleware(AuthMiddleware, settings=settings)

    # Wraps auth so failed credentials count against the budget
    app.add_middleware(RateLimitMiddleware, settings=settings)

    # Wraps both so 401 and 429 responses get the headers too
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)

    # Outermost so preflight and short-circuit responses carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(auth.router, prefix=v1_prefix)
    app.include_router(users.router, prefix=v1_prefix)
    app.include_router(symptoms.router, prefix=v1_prefix)
    app.include_router(cycles.router, prefix=v1_prefix)
    app.include_router(insights.router, prefix=v1_prefix)

    return app


app = create_app()
