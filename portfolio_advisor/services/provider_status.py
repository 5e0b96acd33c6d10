"""Cool-down windows for quote providers that refused service."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class CoolDown:
    until: float
    reason: str


class ProviderStatus:
    """Remembers which providers are benched, why, and until when.

    Expired entries are dropped lazily on lookup. A new window never shortens
    an existing one.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._benched: dict[str, CoolDown] = {}

    def disable_provider(self, provider: str, ttl_seconds: int, reason: str = "rate_limit") -> float:
        candidate = self._clock() + max(1, ttl_seconds)
        with self._lock:
            existing = self._benched.get(provider)
            if existing is None or existing.until < candidate:
                self._benched[provider] = CoolDown(until=candidate, reason=reason)
            return self._benched[provider].until

    def enable_provider(self, provider: str) -> None:
        with self._lock:
            self._benched.pop(provider, None)

    def _active(self, provider: str) -> CoolDown | None:
        entry = self._benched.get(provider)
        if entry is not None and entry.until <= self._clock():
            del self._benched[provider]
            return None
        return entry

    def is_disabled(self, provider: str) -> bool:
        return self.get_disabled_until(provider) is not None

    def get_disabled_until(self, provider: str) -> float | None:
        with self._lock:
            entry = self._active(provider)
        return entry.until if entry else None

    def snapshot(self) -> dict[str, dict[str, object]]:
        with self._lock:
            names = list(self._benched)
            active = {name: self._active(name) for name in names}
        return {
            name: {"disabled_until": round(entry.until, 3), "reason": entry.reason}
            for name, entry in active.items()
            if entry is not None
        }
