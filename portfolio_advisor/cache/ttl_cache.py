"""In-memory TTL cache for market listings and symbol search."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable


@dataclass(frozen=True)
class _Entry:
    value: object
    expires_at: float


class TTLCache:
    """Thread-safe string-keyed cache; an entry past its deadline reads as missing."""

    def __init__(self, default_ttl_seconds: int = 60, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl_seconds = max(1, default_ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = Lock()

    def get(self, key: str) -> object | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else max(1, ttl_seconds)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)
