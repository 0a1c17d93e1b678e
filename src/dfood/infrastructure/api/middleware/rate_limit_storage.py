"""In-memory token buckets for per-client rate limiting."""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict

STALE_AFTER_SECONDS = 3600


@dataclass
class TokenBucket:
    """Token bucket for a single client key."""

    tokens: float
    last_updated: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one ``consume`` call."""

    allowed: bool
    remaining: int
    reset_seconds: float


class RateLimitStorage:
    """Thread-safe in-memory storage for rate limit buckets."""

    def __init__(
        self,
        cleanup_interval: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize storage.

        Args:
            cleanup_interval: Seconds between sweeps of idle buckets.
            clock: Monotonic time source, overridable in tests.
        """
        self._buckets: Dict[str, TokenBucket] = {}
        self._lock = Lock()
        self._clock = clock
        self._last_cleanup = clock()
        self._cleanup_interval = cleanup_interval

    def consume(self, key: str, rate_per_minute: float, burst: float = 1.0) -> RateLimitDecision:
        """Take one token from ``key``'s bucket if one is available.

        Args:
            key: Client key, usually ``ip:<address>``.
            rate_per_minute: Sustained refill rate.
            burst: Bucket capacity; never below one token.
        """
        now = self._clock()
        rate_per_second = rate_per_minute / 60.0
        capacity = max(1.0, burst)

        with self._lock:
            if now - self._last_cleanup > self._cleanup_interval:
                self._cleanup_stale(now)

            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(tokens=capacity, last_updated=now)
                self._buckets[key] = bucket
            else:
                elapsed = now - bucket.last_updated
                bucket.tokens = min(capacity, bucket.tokens + elapsed * rate_per_second)
                bucket.last_updated = now

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return RateLimitDecision(
                    allowed=True,
                    remaining=int(bucket.tokens),
                    reset_seconds=(capacity - bucket.tokens) / rate_per_second,
                )

            return RateLimitDecision(
                allowed=False,
                remaining=0,
                reset_seconds=(1.0 - bucket.tokens) / rate_per_second,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _cleanup_stale(self, now: float) -> None:
        stale = [k for k, b in self._buckets.items() if now - b.last_updated > STALE_AFTER_SECONDS]
        for k in stale:
            del self._buckets[k]
        self._last_cleanup = now
