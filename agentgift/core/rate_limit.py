"""Fixed-window request limits shared by the routers.

Counters live in process memory (``memory://``), so every worker keeps its
own windows and a restart clears them. Requests are keyed by client IP plus
user agent.
"""

from __future__ import annotations

import logging
import math
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from .config import settings

logger = logging.getLogger(__name__)


RATE_LIMITS = {
    "auth": "5 per 15 minutes",
    "signup": "3 per 1 hour",
    "api": "60 per 1 minute",
    "admin": "100 per 1 minute",
    "gift_suggestions": "20 per 1 minute",
}


def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    real_ip = request.headers.get("x-real-ip")
    ip = None
    if forwarded:
        ip = forwarded.split(",")[0].strip() or None
    if not ip and real_ip:
        ip = real_ip.strip() or None
    if not ip and request.client is not None:
        ip = request.client.host
    user_agent = request.headers.get("user-agent") or "unknown"
    return f"{ip or 'unknown'}:{user_agent}"


limiter = Limiter(
    key_func=client_identifier,
    strategy="fixed-window",
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    now = time.time()
    reset_at = now
    max_requests = None
    current = getattr(request.state, "view_rate_limit", None)
    if current is not None:
        item, identifiers = current
        window_reset, _ = limiter.limiter.get_window_stats(item, *identifiers)
        reset_at = window_reset
        max_requests = item.amount
    retry_after = max(0, math.ceil(reset_at - now))
    logger.info("Rate limit exceeded for %s on %s", client_identifier(request), request.url.path)

    headers = {
        "Retry-After": str(retry_after),
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": str(int(reset_at)),
    }
    if max_requests is not None:
        headers["X-RateLimit-Limit"] = str(max_requests)
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests",
            "message": "Rate limit exceeded. Please try again later.",
            "retryAfter": retry_after,
        },
        headers=headers,
    )
