"""Queries against the ``users`` table."""

from __future__ import annotations

import logging
from typing import Any

from periodtracker.services.database import affected_rows, execute, fetchrow, fetchval

logger = logging.getLogger("periodtracker.services.users")

# Columns safe to return to clients
USER_COLUMNS = "user_id, name, email, created_at"


async def get_user_by_id(user_id: int) -> dict[str, Any] | None:
    row = await fetchrow(f"SELECT {USER_COLUMNS} FROM users WHERE user_id = $1", user_id)
    return dict(row) if row else None


async def get_user_by_email(email: str, with_password: bool = False) -> dict[str, Any] | None:
    """Case-insensitive lookup; ``with_password`` adds ``password_hash``."""
    columns = f"{USER_COLUMNS}, password_hash" if with_password else USER_COLUMNS
    row = await fetchrow(
        f"SELECT {columns} FROM users WHERE LOWER(email) = LOWER($1)", email
    )
    return dict(row) if row else None


async def user_exists(user_id: int) -> bool:
    return bool(
        await fetchval("SELECT EXISTS (SELECT 1 FROM users WHERE user_id = $1)", user_id)
    )


async def get_password_hash(user_id: int) -> str | None:
    return await fetchval("SELECT password_hash FROM users WHERE user_id = $1", user_id)


async def email_taken(email: str, exclude_user_id: int | None = None) -> bool:
    return bool(
        await fetchval(
            """
            SELECT EXISTS (
                SELECT 1 FROM users
                WHERE LOWER(email) = LOWER($1) AND ($2::int IS NULL OR user_id <> $2)
            )
            """,
            email,
            exclude_user_id,
        )
    )


async def insert_user(name: str, email: str, password_hash: str) -> dict[str, Any]:
    row = await fetchrow(
        f"""
        INSERT INTO users (name, email, password_hash)
        VALUES ($1, $2, $3)
        RETURNING {USER_COLUMNS}
        """,
        name,
        email,
        password_hash,
    )
    logger.info("Registered user %s", row["user_id"])
    return dict(row)


async def update_user(user_id: int, updates: dict[str, Any]) -> dict[str, Any] | None:
    """Apply a partial update of ``name`` / ``email``."""
    set_clauses = []
    params: list[Any] = [user_id]
    for i, (key, value) in enumerate(updates.items(), start=2):
        set_clauses.append(f"{key} = ${i}")
        params.append(value)

    row = await fetchrow(
        f"UPDATE users SET {', '.join(set_clauses)} WHERE user_id = $1 RETURNING {USER_COLUMNS}",
        *params,
    )
    return dict(row) if row else None


async def update_password(user_id: int, password_hash: str) -> bool:
    status = await execute(
        "UPDATE users SET password_hash = $2 WHERE user_id = $1", user_id, password_hash
    )
    return affected_rows(status) == 1


async def delete_user(user_id: int) -> bool:
    """Remove the account; cycles and their symptoms cascade."""
    status = await execute("DELETE FROM users WHERE user_id = $1", user_id)
    deleted = affected_rows(status) == 1
    if deleted:
        logger.info("Deleted user %s", user_id)
    return deleted
