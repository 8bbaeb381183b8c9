"""Password hashing, access tokens and Basic credential decoding.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
Access tokens are short HS256 JWTs carrying the user id in ``sub``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt as pyjwt

from periodtracker.config import Settings, get_settings

logger = logging.getLogger("periodtracker.security")

_HASH_SCHEME = "pbkdf2_sha256"


class InvalidTokenError(Exception):
    """Raised when an access token or Basic header cannot be accepted."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str | None
    expires_at: datetime


# ---------- Passwords ----------


def hash_password(password: str, iterations: int | None = None) -> str:
    rounds = iterations or get_settings().password_hash_iterations
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return f"{_HASH_SCHEME}${rounds}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of ``password`` against a stored hash."""
    try:
        scheme, rounds, salt_hex, digest_hex = stored.split("$")
        if scheme != _HASH_SCHEME:
            return False
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), bytes.fromhex(salt_hex), int(rounds)
        )
    except (ValueError, AttributeError):
        logger.warning("Stored password hash has an unexpected format")
        return False
    return hmac.compare_digest(digest.hex(), digest_hex)


# ---------- Access tokens ----------


def create_access_token(
    user_id: int,
    email: str | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> str:
    s = settings or get_settings()
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": issued,
        "exp": issued + timedelta(minutes=s.token_ttl_minutes),
    }
    return pyjwt.encode(payload, s.jwt_secret, algorithm=s.jwt_algorithm)


def decode_access_token(token: str, settings: Settings | None = None) -> TokenClaims:
    """Validate ``token`` and return its claims.

    Raises:
        InvalidTokenError: If the signature, expiry or subject is invalid.
    """
    s = settings or get_settings()
    try:
        payload = pyjwt.decode(token, s.jwt_secret, algorithms=[s.jwt_algorithm])
    except pyjwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token expired") from exc
    except pyjwt.InvalidTokenError as exc:
        raise InvalidTokenError("Invalid token") from exc

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("Invalid token") from exc

    return TokenClaims(
        user_id=user_id,
        email=payload.get("email"),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


# ---------- Basic credentials ----------


def encode_basic_credentials(email: str, password: str) -> str:
    raw = f"{email}:{password}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def decode_basic_credentials(header: str) -> tuple[str, str]:
    """Split ``Basic base64(email:password)`` into its two parts.

    Only the first colon separates the email, so passwords may contain colons.
    """
    scheme, _, encoded = header.partition(" ")
    if scheme != "Basic" or not encoded:
        raise InvalidTokenError("Malformed Basic credentials")
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise InvalidTokenError("Malformed Basic credentials") from exc
    email, sep, password = decoded.partition(":")
    if not sep or not email:
        raise InvalidTokenError("Malformed Basic credentials")
    return email, password
