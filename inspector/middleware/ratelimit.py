"""Per-route, per-client fixed-window rate limiting.

Inspection routes fan out to several paid upstream APIs per request, so each
one gets its own budget. Counters live in process memory; with several
workers each enforces its own window.
"""

import asyncio
import time
from collections.abc import Callable
from typing import NamedTuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from inspector.config import Settings

# Expired windows are swept once the table grows past this many clients.
SWEEP_THRESHOLD = 10_000


class Decision(NamedTuple):
    allowed: bool
    limit: int
    remaining: int
    reset: int


class RateLimiter:
    """Fixed-window counter keyed by key_fn(request)."""

    def __init__(self, max_requests: int, window_seconds: float, key_fn: Callable[[Request], str]):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.key_fn = key_fn
        # key -> (count, window_end)
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def check(self, request: Request) -> Decision:
        async with self._lock:
            return self.hit(self.key_fn(request), time.time())

    def hit(self, key: str, now: float) -> Decision:
        """Count one request for key at time now."""
        if len(self._windows) > SWEEP_THRESHOLD:
            self._sweep(now)

        count, window_end = self._windows.get(key, (0, 0.0))
        if now >= window_end:
            count, window_end = 0, now + self.window_seconds
        count += 1
        self._windows[key] = (count, window_end)

        remaining = self.max_requests - count
        return Decision(remaining >= 0, self.max_requests, max(remaining, 0), int(window_end))

    def _sweep(self, now: float) -> None:
        self._windows = {k: v for k, v in self._windows.items() if v[1] > now}


def key_by_ip(request: Request) -> str:
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


def configure_rate_limiters(config: Settings) -> dict[tuple[str, str], RateLimiter]:
    """Route limiters keyed by (method, path)."""
    window = config.rate_limit_window_seconds
    return {
        ("GET", "/api/inspect"): RateLimiter(config.rate_limit_inspect, window, key_by_ip),
        ("POST", "/api/inspect/manual"): RateLimiter(config.rate_limit_manual, window, key_by_ip),
        ("GET", "/api/following"): RateLimiter(config.rate_limit_following, window, key_by_ip),
        ("GET", "/api/reputation"): RateLimiter(config.rate_limit_reputation, window, key_by_ip),
        ("GET", "/api/reputation/rankings"): RateLimiter(
            config.rate_limit_reputation, window, key_by_ip
        ),
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies the matching route limiter and sets X-RateLimit-* headers."""

    def __init__(self, app: ASGIApp, limiters: dict[tuple[str, str], RateLimiter]):
        super().__init__(app)
        self._limiters = limiters

    async def dispatch(self, request: Request, call_next):
        limiter = self._limiters.get((request.method, request.url.path.rstrip("/")))
        if limiter is None:
            return await call_next(request)

        decision = await limiter.check(request)

        if decision.allowed:
            response = await call_next(request)
        else:
            retry_after = max(1, decision.reset - int(time.time()))
            response = JSONResponse(
                status_code=429,
                content={
                    "error": {
                        "code": "RATE_LIMITED",
                        "message": f"Too many requests. Try again in {retry_after} seconds.",
                        "retryAfter": retry_after,
                    }
                },
                headers={"Retry-After": str(retry_after)},
            )

        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = str(decision.reset)
        return response
