"""Per-provider minimum-interval pacing for upstream calls."""

from __future__ import annotations

import time
from threading import Lock


class RateLimiterRegistry:
    """Spaces consecutive calls to the same provider by at least `min_interval_seconds`.

    The local demo adapter is never paced.
    """

    UNPACED = frozenset({"demo"})

    def __init__(self, min_interval_seconds: float = 0.2, overrides: dict[str, float] | None = None) -> None:
        self.min_interval_seconds = max(0.0, min_interval_seconds)
        self._overrides = {key: max(0.0, value) for key, value in (overrides or {}).items()}
        self._last_called: dict[str, float] = {}
        self._lock = Lock()

    def interval_for(self, provider: str) -> float:
        if provider in self.UNPACED:
            return 0.0
        return self._overrides.get(provider, self.min_interval_seconds)

    def wait(self, provider: str) -> None:
        interval = self.interval_for(provider)
        if interval <= 0:
            return
        with self._lock:
            last = self._last_called.get(provider)
            now = time.monotonic()
            if last is not None:
                delta = now - last
                if delta < interval:
                    time.sleep(interval - delta)
            self._last_called[provider] = time.monotonic()
