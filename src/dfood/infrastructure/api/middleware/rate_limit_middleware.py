"""Per-IP rate limiting middleware.

Limits every client address to a fixed number of requests per minute.
Health probes are never limited.
"""

import math

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from dfood.core.config import Settings
from dfood.core.logging import get_logger
from dfood.infrastructure.api.middleware.rate_limit_storage import RateLimitStorage

logger = get_logger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/ready", "/live"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce the per-IP request limit."""

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        storage: RateLimitStorage | None = None,
    ) -> None:
        super().__init__(app)
        self.settings = settings
        self.storage = storage or RateLimitStorage()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Reject the request with 429 once the client's bucket is empty."""
        if not self.settings.rate_limit_enabled or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = f"ip:{request.client.host}" if request.client else "ip:unknown"
        rate = self.settings.rate_limit_per_minute
        decision = self.storage.consume(key, rate, burst=self.settings.rate_limit_burst)
        reset = str(math.ceil(decision.reset_seconds))

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                key=key,
                path=request.url.path,
                rate=rate,
                retry_after=reset,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too Many Requests",
                    "message": f"Rate limit exceeded. Try again in {reset} seconds.",
                },
                headers={
                    "Retry-After": reset,
                    "X-RateLimit-Limit": str(rate),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset,
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rate)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        response.headers["X-RateLimit-Reset"] = reset
        return response
