"""Per-client request throttling for the task API.

Each limit is a set of token buckets keyed by client IP, held in process
memory. Limits come from Settings:
- every non-exempt request: ``rate_limit_global_rpm`` per minute
- POST /api/auth/login and /api/auth/register: ``rate_limit_auth_rpm`` per
  minute, on top of the global limit, to slow password guessing

A bucket left alone long enough to refill completely carries no state a
fresh bucket wouldn't, so idle buckets are dropped on a periodic sweep.
``rate_limit_max_clients`` caps how many buckets one limit may hold; past
it the least recently seen client is forgotten.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

_CREDENTIAL_PATHS = frozenset({
    "/api/auth/login",
    "/api/auth/register",
})

_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc", "/"})

RETRY_AFTER_SECONDS = 60


class TokenBucket:
    """``capacity`` requests up front, refilled at ``rate`` per second."""

    def __init__(self, rate: float, capacity: int, now: float | None = None) -> None:
        self.rate = rate
        self.capacity = capacity
        self.tokens = float(capacity)
        self.last_seen = time.monotonic() if now is None else now

    def consume(self, now: float | None = None) -> bool:
        """Take one token if available. Returns True if the request may proceed."""
        now = time.monotonic() if now is None else now
        elapsed = max(0.0, now - self.last_seen)
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self.last_seen = now

        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False


class ClientBuckets:
    """Token buckets for one per-minute limit, keyed by client.

    Buckets are kept least recently seen first, so both the idle sweep and
    the size cap only ever look at the front of the map.
    """

    def __init__(self, per_minute: int, max_clients: int = 10_000, sweep_every: float = 60.0) -> None:
        self.capacity = max(1, per_minute)
        self.rate = self.capacity / 60.0
        # Time for an empty bucket to fill back up
        self.idle_after = self.capacity / self.rate
        self.max_clients = max(1, max_clients)
        self.sweep_every = sweep_every
        self._buckets: OrderedDict[str, TokenBucket] = OrderedDict()
        self._last_sweep = float("-inf")

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, client: str) -> bool:
        return client in self._buckets

    def allow(self, client: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        if now - self._last_sweep >= self.sweep_every:
            self.sweep(now)

        bucket = self._buckets.get(client)
        if bucket is None:
            if len(self._buckets) >= self.max_clients:
                self.sweep(now)
            while len(self._buckets) >= self.max_clients:
                stale, _ = self._buckets.popitem(last=False)
                logger.debug("Rate limiter full, forgetting %s", stale)
            bucket = TokenBucket(self.rate, self.capacity, now=now)
            self._buckets[client] = bucket
        else:
            self._buckets.move_to_end(client)
        return bucket.consume(now)

    def sweep(self, now: float) -> int:
        """Drop buckets idle for at least ``idle_after`` seconds; return how many."""
        self._last_sweep = now
        dropped = 0
        while self._buckets:
            client, bucket = next(iter(self._buckets.items()))
            if now - bucket.last_seen < self.idle_after:
                break
            del self._buckets[client]
            dropped += 1
        return dropped


def _too_many(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"detail": detail},
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects over-limit clients with 429 before routing.

    Args:
        global_rpm: Requests per minute per client, any endpoint.
        auth_rpm: Login/register attempts per minute per client.
        max_clients: Most clients tracked per limit.
    """

    def __init__(self, app, global_rpm: int = 120, auth_rpm: int = 10, max_clients: int = 10_000) -> None:
        super().__init__(app)
        self.global_limit = ClientBuckets(global_rpm, max_clients=max_clients)
        self.auth_limit = ClientBuckets(auth_rpm, max_clients=max_clients)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in _EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        if not self.global_limit.allow(client_ip):
            logger.warning("Rate limit exceeded for %s on %s", client_ip, path)
            return _too_many("Rate limit exceeded. Please retry later.")

        if request.method == "POST" and path in _CREDENTIAL_PATHS:
            if not self.auth_limit.allow(client_ip):
                logger.warning("Credential rate limit exceeded for %s on %s", client_ip, path)
                return _too_many("Too many authentication attempts. Please retry later.")

        return await call_next(request)
