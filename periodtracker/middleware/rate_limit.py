"""In-memory sliding-window rate limiter.

Two budgets per client IP: a general one for the whole API and a much
smaller one for password attempts.  The login/register endpoints always
draw on the smaller budget; elsewhere a request carrying Basic credentials
is charged to it only when it is rejected with 401, so a client guessing
passwords is cut off while a valid Basic client is not.  State lives in
process memory, so limits are per worker.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from periodtracker.config import Settings, get_settings

AUTH_PATHS: frozenset[str] = frozenset({"/api/v1/auth/login", "/api/v1/auth/register"})


class SlidingWindow:
    """Timestamps of recent requests per key, trimmed to ``window_seconds``."""

    def __init__(self, max_requests: int, window_seconds: float = 60.0) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._hits: dict[str, list[float]] = defaultdict(list)

    def _cleanup(self, key: str, now: float) -> None:
        cutoff = now - self.window_seconds
        self._hits[key] = [t for t in self._hits[key] if t > cutoff]

    def retry_after(self, key: str, now: float) -> int | None:
        """Seconds to wait if ``key`` is over budget, else ``None``."""
        self._cleanup(key, now)
        hits = self._hits[key]
        if len(hits) < self.max_requests:
            return None
        return max(int(self.window_seconds - (now - hits[0])), 1)

    def hit(self, key: str, now: float) -> int:
        """Record a request and return the remaining budget."""
        self._hits[key].append(now)
        return max(self.max_requests - len(self._hits[key]), 0)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP limiter with a tighter budget on authentication endpoints."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        s = settings or get_settings()
        self._general = SlidingWindow(s.rate_limit_per_minute)
        self._auth = SlidingWindow(s.auth_rate_limit_per_minute)

    def _client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ip = self._client_ip(request)
        now = time.monotonic()
        window = self._auth if request.url.path in AUTH_PATHS else self._general
        basic = request.headers.get("Authorization", "").startswith("Basic ")

        retry_after = window.retry_after(ip, now)
        if retry_after is None and basic and window is not self._auth:
            retry_after = self._auth.retry_after(ip, now)
        if retry_after is not None:
            return Response(
                content='{"detail":"Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(retry_after)},
            )

        remaining = window.hit(ip, now)
        response = await call_next(request)

        if basic and window is not self._auth and response.status_code == 401:
            self._auth.hit(ip, now)

        response.headers["X-RateLimit-Limit"] = str(window.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
