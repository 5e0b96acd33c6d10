"""Shared service orchestration helpers."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.utils.rate_limit import RateLimiterRegistry

SYMBOL_PATTERN = re.compile(r"^[A-Z][A-Z0-9.\-]{0,9}$")
T = TypeVar("T")
INTERNAL_PROVIDER_KEYS = frozenset({"provider_status"})


@dataclass
class ErrorEnvelope:
    code: str
    message: str
    retriable: bool = True
    provider: str | None = None


@dataclass
class ServiceResult(Generic[T]):
    data: T | None
    source: str | None = None
    warning: str | None = None
    error: ErrorEnvelope | None = None
    fetched_at: float | None = None
    data_provider: str | None = None

    @property
    def is_demo(self) -> bool:
        return self.data_provider == "demo"


@dataclass
class ServiceContext:
    providers: dict[str, object]
    cache: TTLCache
    rate_limiter: RateLimiterRegistry
    cache_ttl_seconds: int = 60
    request_limiter: object | None = None
    server_metrics: object | None = None

    def get_provider(self, name: str) -> object | None:
        return self.providers.get(name)

    def configured_providers(self) -> list[str]:
        return sorted(
            name for name, client in self.providers.items() if client is not None and name not in INTERNAL_PROVIDER_KEYS
        )


def validate_symbol(symbol: str) -> str:
    clean = str(symbol).strip().upper()
    if not clean or len(clean) > 10 or not SYMBOL_PATTERN.match(clean):
        raise ValueError("Symbol must be 1-10 chars: A-Z, 0-9, dot, hyphen.")
    return clean


def run_with_cache(
    ctx: ServiceContext,
    cache_key: str,
    call: Callable[[], ServiceResult[T]],
    ttl_seconds: int | None = None,
) -> ServiceResult[T]:
    """Serve a cached result when fresh; only successful results are stored."""
    cached = ctx.cache.get(cache_key)
    if isinstance(cached, ServiceResult):
        return cached
    value = call()
    value.fetched_at = value.fetched_at or time.time()
    if value.data is not None:
        ctx.cache.set(cache_key, value, ttl_seconds=ttl_seconds or ctx.cache_ttl_seconds)
    return value
