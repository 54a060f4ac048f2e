"""
Rate Limiting Configuration using SlowAPI.

Only the plain-HTTP surface (health checks) is limited; WebSocket traffic is
paced by the per-channel message queue instead.
"""

import os
from typing import Callable

from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address


def _get_identifier(request: Request) -> str:
    """Use the first X-Forwarded-For hop when behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=_get_identifier,
    default_limits=[os.getenv("RATE_LIMIT_DEFAULT", "100/minute")],
)


def setup_rate_limiter(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def limit_health(func: Callable) -> Callable:
    """
    Rate limit decorator for health check endpoints.

    Default: 100 requests per minute.
    """
    limit = os.getenv("RATE_LIMIT_HEALTH", "100/minute")
    return limiter.limit(limit)(func)
