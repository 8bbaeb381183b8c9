"""Pydantic models for accounts: registration, login and profile updates."""

from __future__ import annotations

from datetime import datetime

from pydantic import EmailStr, Field

from periodtracker.models.base import TrackerBase


# ---------- Auth ----------

class RegisterRequest(TrackerBase):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class LoginRequest(TrackerBase):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisteredUser(TrackerBase):
    user_id: int
    name: str
    email: EmailStr


class LoginResponse(RegisteredUser):
    token: str
    token_type: str = "bearer"
    expires_at: datetime


# ---------- Profile ----------

class UserRead(TrackerBase):
    user_id: int
    name: str
    email: EmailStr
    created_at: datetime


class UserUpdate(TrackerBase):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None


class PasswordUpdate(TrackerBase):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=8, max_length=128)
