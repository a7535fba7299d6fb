"""Token bucket limiting outbound chat messages."""

import asyncio
import logging
import time
from collections.abc import Callable

_EPSILON = 1e-9


class OutboundRateLimiter:
    """Asyncio token bucket for the outbound chat path.

    Tokens regenerate at one per ``interval`` seconds up to ``capacity``. With
    the default capacity of 1 at most one message leaves per interval. Inbound
    processing never touches the bucket.
    """

    def __init__(
        self,
        interval: float,
        capacity: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.interval = interval
        self.capacity = capacity
        self._clock = clock
        self._tokens = float(capacity)
        self._updated = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(float(self.capacity), self._tokens + elapsed / self.interval)
        self._updated = now

    def try_acquire(self) -> bool:
        """Take a token without waiting; False if the bucket is empty."""
        self._refill()
        if self._tokens >= 1 - _EPSILON:
            self._tokens = max(0.0, self._tokens - 1)
            return True
        return False

    async def acquire(self) -> float:
        """Wait until a token is available and take it.

        Returns:
            Seconds spent waiting.
        """
        waited = 0.0
        async with self._lock:
            while not self.try_acquire():
                delay = (1 - self._tokens) * self.interval
                if delay > 1:
                    logging.warning(f"⏳ Outbound rate limit - waiting {round(delay, 2)}s")
                else:
                    logging.debug(f"⏱️ Outbound rate limit - waiting {round(delay, 2)}s")
                await asyncio.sleep(delay)
                waited += delay
        return waited

    def snapshot(self) -> dict[str, object]:
        """Return a serializable snapshot of limiter state for debugging."""
        self._refill()
        return {
            "interval": self.interval,
            "capacity": self.capacity,
            "tokens": round(self._tokens, 3),
        }
