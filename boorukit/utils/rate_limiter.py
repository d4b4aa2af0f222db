"""Rate limiter for API requests."""

import asyncio
import threading
import time
from typing import Any, Callable, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """Token-bucket rate limiter with continuous refill.

    Tokens accrue at ``requests / per_seconds`` per second up to ``requests``
    and every acquisition consumes exactly one. Refill is computed lazily from
    the elapsed time whenever the bucket is inspected; there is no background
    timer. One instance may be shared by any number of clients and streams.
    """

    def __init__(self, requests: int = 2, per_seconds: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize rate limiter.

        Args:
            requests: Bucket capacity (requests allowed per interval)
            per_seconds: Refill interval in seconds for a full bucket
            clock: Monotonic time source, injectable for tests
        """
        if requests < 1:
            raise ValueError("requests must be at least 1")
        if per_seconds <= 0:
            raise ValueError("per_seconds must be positive")

        self.capacity = requests
        self.refill_interval = per_seconds
        self._clock = clock
        self._tokens = float(requests)
        self._last_update = clock()
        # Guards token state; never held across an await
        self._state_lock = threading.Lock()
        # Queues async waiters so they are served in arrival order
        self._waiters = asyncio.Lock()

    @classmethod
    def default_booru(cls) -> 'RateLimiter':
        """Conservative default for public booru APIs: 2 requests per second."""
        return cls(requests=2, per_seconds=1.0)

    @classmethod
    def from_config(cls, rate_config: Optional[Dict[str, Any]] = None) -> 'RateLimiter':
        """Create a limiter from the ``rate_limit`` config section."""
        rate_config = rate_config or {}
        return cls(
            requests=int(rate_config.get('requests', 2)),
            per_seconds=float(rate_config.get('per_seconds', 1.0)),
        )

    @property
    def refill_rate(self) -> float:
        """Tokens added per second."""
        return self.capacity / self.refill_interval

    async def acquire(self):
        """Wait until a token is available, then consume it."""
        async with self._waiters:
            while True:
                with self._state_lock:
                    self._refill()
                    if self._tokens >= 1.0:
                        self._tokens -= 1.0
                        return
                    wait_time = (1.0 - self._tokens) / self.refill_rate

                logger.debug(f"Rate limit reached, waiting {wait_time:.3f}s")
                await asyncio.sleep(wait_time)

    def try_acquire(self) -> bool:
        """Consume a token if one is available, without waiting.

        Returns:
            True if a token was consumed
        """
        with self._state_lock:
            self._refill()
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False

    def available(self) -> int:
        """Number of whole tokens currently available."""
        with self._state_lock:
            self._refill()
            return int(self._tokens)

    def get_stats(self) -> dict:
        """Get current rate limiter statistics.

        Returns:
            Dictionary with current token count and bucket settings
        """
        with self._state_lock:
            self._refill()
            tokens = self._tokens

        return {
            'available_tokens': tokens,
            'capacity': self.capacity,
            'refill_interval_seconds': self.refill_interval,
            'can_make_request': tokens >= 1.0
        }

    def reset(self):
        """Refill the bucket to capacity."""
        with self._state_lock:
            self._tokens = float(self.capacity)
            self._last_update = self._clock()

    def _refill(self):
        now = self._clock()
        elapsed = now - self._last_update
        if elapsed > 0:
            self._tokens = min(self._tokens + elapsed * self.refill_rate, float(self.capacity))
            self._last_update = now

    def __repr__(self) -> str:
        return f"RateLimiter(capacity={self.capacity}, refill_interval={self.refill_interval})"
