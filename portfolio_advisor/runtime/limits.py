"""Per-client request limiting for the HTTP routes."""

from __future__ import annotations

import threading
import time
from collections import defaultdict, deque
from typing import Callable

WINDOW_SECONDS = 60.0


class RateLimitExceeded(Exception):
    def __init__(self, retry_after_seconds: float) -> None:
        self.retry_after_seconds = max(0.0, retry_after_seconds)
        super().__init__("Rate limit exceeded")


class RequestLimiter:
    """Sliding one-minute window per client plus a cap on in-flight requests.

    Every successful `acquire` must be paired with `release`.
    """

    def __init__(
        self,
        requests_per_minute: int = 100,
        queue_limit: int = 200,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.requests_per_minute = max(1, requests_per_minute)
        self.queue_limit = max(1, queue_limit)
        self._clock = clock
        self._lock = threading.Lock()
        self._timestamps: dict[str, deque[float]] = defaultdict(deque)
        self._inflight = 0

    @property
    def inflight(self) -> int:
        with self._lock:
            return self._inflight

    def acquire(self, client_id: str) -> None:
        now = self._clock()
        window_start = now - WINDOW_SECONDS
        with self._lock:
            if self._inflight >= self.queue_limit:
                raise RateLimitExceeded(retry_after_seconds=1.0)
            bucket = self._timestamps[client_id]
            while bucket and bucket[0] < window_start:
                bucket.popleft()
            if len(bucket) >= self.requests_per_minute:
                raise RateLimitExceeded(retry_after_seconds=max(0.1, WINDOW_SECONDS - (now - bucket[0])))
            bucket.append(now)
            self._inflight += 1

    def release(self) -> None:
        with self._lock:
            self._inflight = max(0, self._inflight - 1)
