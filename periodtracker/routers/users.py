"""Profile management for the authenticated user."""

from __future__ import annotations

from typing import Any

import asyncpg
from fastapi import APIRouter, HTTPException

from periodtracker.dependencies import CurrentUser
from periodtracker.models.base import MessageResponse
from periodtracker.models.users import PasswordUpdate, UserRead, UserUpdate
from periodtracker.services import users as user_service
from periodtracker.services.security import hash_password, verify_password

router = APIRouter(prefix="/users", tags=["users"])


async def _load_profile(user_id: int) -> dict[str, Any]:
    row = await user_service.get_user_by_id(user_id)
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return row


# ---------- Current User (me) ----------

@router.get("/me", response_model=UserRead)
async def get_current_user_profile(user: CurrentUser) -> Any:
    """Get the authenticated user's profile."""
    return await _load_profile(user.user_id)


@router.get("/by-email/{email}", response_model=UserRead)
async def get_user_by_email(email: str, user: CurrentUser) -> Any:
    """Look up a profile by email; callers may only look up themselves."""
    profile = await _load_profile(user.user_id)
    if profile["email"].lower() != email.lower():
        raise HTTPException(status_code=403, detail="You can only access your own information")
    return profile


@router.put("/me", response_model=UserRead)
async def update_current_user(user: CurrentUser, body: UserUpdate) -> Any:
    """Update the authenticated user's name and/or email."""
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    if "email" in updates and await user_service.email_taken(
        updates["email"], exclude_user_id=user.user_id
    ):
        raise HTTPException(
            status_code=409, detail=f"Email '{updates['email']}' is already taken"
        )

    try:
        row = await user_service.update_user(user.user_id, updates)
    except asyncpg.UniqueViolationError:
        raise HTTPException(
            status_code=409, detail=f"Email '{updates['email']}' is already taken"
        )
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return row


@router.put("/me/password", response_model=MessageResponse)
async def update_password(user: CurrentUser, body: PasswordUpdate) -> Any:
    stored = await user_service.get_password_hash(user.user_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not verify_password(body.current_password, stored):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    if not await user_service.update_password(user.user_id, hash_password(body.new_password)):
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Password updated successfully"}


@router.delete("/me", status_code=204)
async def delete_current_user(user: CurrentUser) -> None:
    """Delete the account together with all of its cycles."""
    if not await user_service.delete_user(user.user_id):
        raise HTTPException(status_code=404, detail="User not found")
