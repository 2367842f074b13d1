"""
Request ceiling for the remote model.

Requests beyond the ceiling are refused immediately instead of waiting, so the
caller can switch to its local fallback.
"""

import time
from collections import deque
from typing import Callable, Deque

from ..core.exceptions import RateLimitExceededError


class RequestRateLimiter:
    """Sliding-window limiter: at most ``max_requests`` per ``period_seconds``."""

    def __init__(self, max_requests: int, period_seconds: float = 60.0,
                 clock: Callable[[], float] = time.monotonic):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.period_seconds = period_seconds
        self._clock = clock
        self._timestamps: Deque[float] = deque()

    def _evict(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.period_seconds:
            self._timestamps.popleft()

    @property
    def remaining(self) -> int:
        self._evict(self._clock())
        return self.max_requests - len(self._timestamps)

    def acquire(self) -> None:
        """
        Record one request.

        Raises:
            RateLimitExceededError: If the window is already full
        """
        now = self._clock()
        self._evict(now)
        if len(self._timestamps) >= self.max_requests:
            retry_in = self.period_seconds - (now - self._timestamps[0])
            raise RateLimitExceededError(
                f"Model request limit of {self.max_requests} per "
                f"{self.period_seconds:.0f}s reached, retry in {retry_in:.1f}s"
            )
        self._timestamps.append(now)
