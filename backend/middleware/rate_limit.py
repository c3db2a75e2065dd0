"""
In-memory rate limiting for order placement.

Request times are kept per (client IP, route) in a sliding window. State lives
in the process, so each worker counts on its own; a multi-worker deployment
needs a shared store (Redis) instead.
"""
import logging
import math
import time
from collections import defaultdict, deque
from typing import Callable

from fastapi import Request

from domain.errors import RateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window counter keyed by arbitrary strings."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def _window(self, key: str, window_seconds: int) -> deque[float]:
        hits = self._hits[key]
        horizon = self._clock() - window_seconds
        while hits and hits[0] <= horizon:
            hits.popleft()
        return hits

    def check(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record a request for `key`. False when the window is already full."""
        hits = self._window(key, window_seconds)
        if len(hits) >= max_requests:
            return False
        hits.append(self._clock())
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        return max(0, max_requests - len(self._window(key, window_seconds)))

    def retry_after(self, key: str, window_seconds: int) -> int:
        """Seconds until the oldest request in the window expires."""
        hits = self._window(key, window_seconds)
        if not hits:
            return 0
        return max(1, math.ceil(hits[0] + window_seconds - self._clock()))

    def reset(self):
        self._hits.clear()


limiter = RateLimiter()


def _client_key(request: Request) -> str:
    host = request.client.host if request.client else "unknown"
    return f"{host}:{request.url.path}"


def rate_limit(max_requests: int = 10, window_seconds: int = 60):
    """
    Dependency factory: Depends(rate_limit(30, 60)) allows 30 requests per
    client per minute on the route it guards.
    """
    async def _enforce(request: Request):
        key = _client_key(request)
        if limiter.check(key, max_requests, window_seconds):
            return

        logger.warning(f"Rate limit hit for {key} ({max_requests}/{window_seconds}s)")
        exc = RateLimitError(
            f"Too many requests. Limit is {max_requests} per {window_seconds} seconds.",
            details={"limit": max_requests, "windowSeconds": window_seconds},
        )
        exc.headers = {
            "Retry-After": str(limiter.retry_after(key, window_seconds)),
            "X-RateLimit-Limit": str(max_requests),
            "X-RateLimit-Remaining": str(limiter.remaining(key, max_requests, window_seconds)),
        }
        raise exc

    return _enforce
