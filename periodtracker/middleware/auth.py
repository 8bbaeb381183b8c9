"""Authentication middleware for FastAPI.

Accepts two ``Authorization`` schemes on every non-public request:

- ``Bearer <jwt>``: the token returned by ``POST /api/v1/auth/login``.
- ``Basic base64(email:password)``: checked against the stored password
  hash on each request.  Kept for older clients that never log in;
  disable with ``ALLOW_BASIC_AUTH=false``.

On success ``request.state.auth`` holds an ``AuthContext`` that route
handlers consume via ``get_current_user``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from periodtracker.config import Settings, get_settings
from periodtracker.dependencies import AuthContext
from periodtracker.services import users as user_service
from periodtracker.services.security import (
    InvalidTokenError,
    decode_access_token,
    decode_basic_credentials,
    verify_password,
)

logger = logging.getLogger("periodtracker.auth")

# Paths that do not require authentication
PUBLIC_PATHS: set[str] = {
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/symptoms",
}


def _is_public(path: str) -> bool:
    path = path.rstrip("/") or "/"
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


def _unauthorized(detail: str, scheme: str = "Bearer") -> Response:
    return Response(
        content=f'{{"detail":"{detail}"}}',
        status_code=401,
        media_type="application/json",
        headers={"WWW-Authenticate": scheme},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Resolve the caller from a Bearer token or Basic credentials."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if _is_public(request.url.path):
            return await call_next(request)

        # OPTIONS requests pass through (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")

        if auth_header.startswith("Bearer "):
            token = auth_header.removeprefix("Bearer ").strip()
            try:
                claims = decode_access_token(token, self._settings)
            except InvalidTokenError as exc:
                logger.warning("Bearer token rejected: %s", exc)
                return _unauthorized(str(exc))
            # Tokens outlive account deletion until they expire
            if not await user_service.user_exists(claims.user_id):
                logger.warning("Bearer token for deleted user %s", claims.user_id)
                return _unauthorized("User no longer exists")
            request.state.auth = AuthContext(
                user_id=claims.user_id, email=claims.email, scheme="bearer"
            )
            return await call_next(request)

        if auth_header.startswith("Basic ") and self._settings.allow_basic_auth:
            try:
                email, password = decode_basic_credentials(auth_header)
            except InvalidTokenError as exc:
                return _unauthorized(str(exc), scheme="Basic")

            user = await user_service.get_user_by_email(email, with_password=True)
            if user is None or not verify_password(password, user["password_hash"]):
                logger.warning("Basic credentials rejected for %s", email)
                return _unauthorized("Invalid credentials", scheme="Basic")

            request.state.auth = AuthContext(
                user_id=user["user_id"], email=user["email"], scheme="basic"
            )
            return await call_next(request)

        return _unauthorized("Missing or invalid Authorization header")
