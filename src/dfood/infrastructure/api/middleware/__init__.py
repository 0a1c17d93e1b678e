"""HTTP middleware for dfood."""

from dfood.infrastructure.api.middleware.rate_limit_middleware import RateLimitMiddleware
from dfood.infrastructure.api.middleware.rate_limit_storage import (
    RateLimitDecision,
    RateLimitStorage,
)

__all__ = ["RateLimitDecision", "RateLimitMiddleware", "RateLimitStorage"]
