"""Request context middleware: request id, timing, access log and rate limiting.

All four concerns run in one pass. The token bucket itself is the pure
function ``check_rate_limit`` so it can be tested without an app.
"""

import logging
import threading
import time
import uuid
from typing import Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# {client_key: (available_tokens, last_refill_timestamp)}
Buckets = Dict[str, Tuple[float, float]]

# Health probes and API docs are never throttled.
EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})

_STALE_AFTER = 120.0


def check_rate_limit(
    bucket: Buckets,
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> Tuple[bool, float]:
    """Take one token for *key* from a bucket refilled at *max_per_minute*.

    Returns ``(allowed, retry_after)``; *retry_after* is 0.0 when allowed,
    otherwise the seconds until the next token. A non-positive limit
    disables throttling. *bucket* is modified in place.
    """
    if max_per_minute <= 0:
        return True, 0.0
    if now is None:
        now = time.monotonic()

    refill_rate = max_per_minute / 60.0
    tokens, last = bucket.get(key, (float(max_per_minute), now))
    tokens = min(float(max_per_minute), tokens + (now - last) * refill_rate)

    if tokens >= 1.0:
        bucket[key] = (tokens - 1.0, now)
        return True, 0.0

    bucket[key] = (tokens, now)
    return False, (1.0 - tokens) / refill_rate


def evict_stale(bucket: Buckets, now: float, max_age: float = _STALE_AFTER) -> int:
    """Drop keys idle for longer than *max_age* seconds; returns how many."""
    stale = [key for key, (_, ts) in bucket.items() if ts < now - max_age]
    for key in stale:
        del bucket[key]
    return len(stale)


class RateLimiter:
    """Thread-safe holder of the per-client buckets."""

    def __init__(self, max_per_minute: int, sweep_every: int = 100):
        self.max_per_minute = max_per_minute
        self.buckets: Buckets = {}
        self._lock = threading.Lock()
        self._calls = 0
        self._sweep_every = sweep_every

    def hit(self, key: str) -> Tuple[bool, float]:
        with self._lock:
            now = time.monotonic()
            self._calls += 1
            if self._calls % self._sweep_every == 0:
                evict_stale(self.buckets, now)
            return check_rate_limit(self.buckets, key, self.max_per_minute, now)

    def reset(self) -> None:
        with self._lock:
            self.buckets.clear()
            self._calls = 0


rate_limiter = RateLimiter(settings.rate_limit_per_minute)


def _client_key(request: Request) -> str:
    """First ``X-Forwarded-For`` hop when proxied, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Single middleware handling request-id, timing, logging, and rate limiting."""

    def __init__(self, app, limiter: RateLimiter = rate_limiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.url.path not in EXEMPT_PATHS:
            key = _client_key(request)
            allowed, retry_after = self.limiter.hit(key)
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"client": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "RATE_LIMITED",
                        "kind": "rate_limited",
                        "message": "Too many requests",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
