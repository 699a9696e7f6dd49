"""Login throttling (slowapi), keyed by client address."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

    from rebook.config.settings import RateLimitConfig

logger = logging.getLogger(__name__)

# Five login attempts per client per 15-minute window.
LOGIN_LIMIT = "5/15 minutes"

limiter = Limiter(key_func=get_remote_address)


async def _rate_limited_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Throttled %s from %s", request.url.path, get_remote_address(request))
    return JSONResponse(
        status_code=429,
        content={
            "error": "too many login attempts, please try again later",
            "code": "rate-limited",
        },
    )


def setup_rate_limit(app: FastAPI, config: RateLimitConfig) -> None:
    """Attach the limiter to *app* with a fresh counter store.

    There is one ``limiter`` per process because the login route is
    decorated with it at import time. Each call resets its counters and
    applies ``config.enabled``, so the most recently built app decides
    throttling for every app in the process.
    """
    limiter.enabled = config.enabled
    limiter.reset()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limited_handler)  # type: ignore[arg-type]
