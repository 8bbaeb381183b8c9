"""Registration and login. Both endpoints are public."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import asyncpg
from fastapi import APIRouter, HTTPException

from periodtracker.dependencies import AppSettings
from periodtracker.models.users import (
    LoginRequest,
    LoginResponse,
    RegisteredUser,
    RegisterRequest,
)
from periodtracker.services import users as user_service
from periodtracker.services.security import (
    create_access_token,
    hash_password,
    verify_password,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("periodtracker.auth")


@router.post("/register", response_model=RegisteredUser, status_code=201)
async def register(body: RegisterRequest) -> Any:
    if await user_service.email_taken(body.email):
        raise HTTPException(status_code=409, detail=f"Email '{body.email}' already exists")

    try:
        user = await user_service.insert_user(
            body.name, body.email, hash_password(body.password)
        )
    except asyncpg.UniqueViolationError:
        # Lost a race with a concurrent registration
        raise HTTPException(status_code=409, detail=f"Email '{body.email}' already exists")
    return user


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, settings: AppSettings) -> Any:
    user = await user_service.get_user_by_email(body.email, with_password=True)
    # Same message whether the email or the password was wrong
    if user is None or not verify_password(body.password, user["password_hash"]):
        logger.info("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    issued = datetime.now(timezone.utc)
    token = create_access_token(user["user_id"], user["email"], settings, now=issued)
    return {
        "user_id": user["user_id"],
        "name": user["name"],
        "email": user["email"],
        "token": token,
        "expires_at": issued + timedelta(minutes=settings.token_ttl_minutes),
    }
