"""Postgres access through a shared ``asyncpg`` pool.

The pool is created once in the app lifespan.  Route handlers and the
repository helpers in ``periodtracker.services`` use the thin wrappers below
instead of touching the pool directly, which keeps every statement inside a
transaction and makes the helpers easy to monkeypatch in tests.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

import asyncpg

from periodtracker.config import Settings, get_settings

logger = logging.getLogger("periodtracker.db")

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "db" / "schema.sql"

# Module-level connection pool, initialized once at app startup
_pool: asyncpg.Pool | None = None


async def init_pool(settings: Settings | None = None) -> asyncpg.Pool:
    """Create the asyncpg connection pool. Call once at app startup."""
    global _pool
    s = settings or get_settings()
    _pool = await asyncpg.create_pool(
        s.database_url,
        min_size=s.db_pool_min_size,
        max_size=s.db_pool_max_size,
        command_timeout=s.db_command_timeout,
    )
    logger.info(
        "Database pool initialized (min=%d, max=%d)",
        s.db_pool_min_size,
        s.db_pool_max_size,
    )
    return _pool


async def close_pool() -> None:
    """Drain the pool. Call at app shutdown."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Database pool not initialized, call init_pool() first")
    return _pool


@asynccontextmanager
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """Acquire a pooled connection wrapped in a transaction.

    Usage::

        async with get_connection() as conn:
            cycle_id = await conn.fetchval("INSERT ... RETURNING cycle_id", ...)
            await conn.executemany("INSERT INTO cycle_symptoms ...", rows)

    Everything inside the block commits together or not at all.
    """
    pool = get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            yield conn


async def execute(query: str, *args: Any) -> str:
    """Execute a single statement and return its status tag (``"DELETE 1"``)."""
    async with get_connection() as conn:
        return await conn.execute(query, *args)


async def fetch(query: str, *args: Any) -> list[asyncpg.Record]:
    async with get_connection() as conn:
        return await conn.fetch(query, *args)


async def fetchrow(query: str, *args: Any) -> asyncpg.Record | None:
    async with get_connection() as conn:
        return await conn.fetchrow(query, *args)


async def fetchval(query: str, *args: Any) -> Any:
    async with get_connection() as conn:
        return await conn.fetchval(query, *args)


def affected_rows(status: str) -> int:
    """Row count from a status tag such as ``"UPDATE 3"``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


async def apply_schema(path: Path = SCHEMA_PATH) -> None:
    """Run the idempotent DDL in ``schema.sql`` (tables, indexes, seed symptoms)."""
    ddl = path.read_text(encoding="utf-8")
    async with get_connection() as conn:
        await conn.execute(ddl)
    logger.info("Schema applied from %s", path.name)
