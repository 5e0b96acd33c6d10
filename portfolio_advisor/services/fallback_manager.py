"""Ordered provider chains for quotes, symbol search and mover lists."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from portfolio_advisor.providers.http import ProviderError
from portfolio_advisor.services.base import ErrorEnvelope, ServiceContext, ServiceResult
from portfolio_advisor.services.provider_status import ProviderStatus

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)

QUOTA_HINTS = (
    "rate limit",
    "requests per day",
    "api credits",
    "premium plan",
    "limit exceeded",
)
RATE_LIMIT_COOL_DOWN_SECONDS = 15 * 60
AUTH_COOL_DOWN_SECONDS = 60 * 60
FALLBACK_WARNING = "Used fallback provider due to upstream issue."
GENERIC_UPSTREAM_MESSAGE = "All market data providers are currently unavailable. Please try again later."


@dataclass(frozen=True)
class ProviderAttempt(Generic[T]):
    key: str
    label: str
    call: Callable[[], T | None]


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class FallbackManager:
    """Walks a provider chain once and returns the first non-empty answer.

    `None` from a provider is a miss. A `ProviderError` that signals quota
    exhaustion or a bad key benches that provider in `ProviderStatus`; any
    other failure just moves on. When the chain is exhausted the caller gets
    an `ErrorEnvelope` with a fixed message, never the upstream text.
    """

    def __init__(
        self,
        ctx: ServiceContext,
        provider_status: ProviderStatus,
        rate_limit_disable_seconds: dict[str, int] | None = None,
    ) -> None:
        self._ctx = ctx
        self._status = provider_status
        self._cool_down_overrides = dict(rate_limit_disable_seconds or {})

    def execute(self, operation: str, subject: str, attempts: list[ProviderAttempt[T]]) -> ServiceResult[T]:
        degraded = False
        for attempt in attempts:
            if self._status.is_disabled(attempt.key):
                LOGGER.info("skip benched provider: op=%s subject=%s provider=%s", operation, subject, attempt.key)
                degraded = True
                continue
            value = self._try(operation, subject, attempt)
            if value is None:
                degraded = True
                continue
            return ServiceResult(
                data=value,
                source=attempt.label,
                warning=FALLBACK_WARNING if degraded else None,
                fetched_at=time.time(),
                data_provider=attempt.key,
            )

        LOGGER.warning("provider chain exhausted: op=%s subject=%s", operation, subject)
        return ServiceResult(
            data=None,
            error=ErrorEnvelope(code="UPSTREAM", message=GENERIC_UPSTREAM_MESSAGE, retriable=True),
        )

    def _try(self, operation: str, subject: str, attempt: ProviderAttempt[T]) -> T | None:
        started = time.perf_counter()
        try:
            self._ctx.rate_limiter.wait(attempt.key)
            value = attempt.call()
        except ProviderError as error:
            LOGGER.warning(
                "provider failed: op=%s subject=%s provider=%s code=%s status=%s latency_ms=%s",
                operation,
                subject,
                attempt.key,
                error.code,
                error.status,
                _elapsed_ms(started),
            )
            self._bench_if_needed(attempt.key, error)
            return None
        except Exception:
            LOGGER.exception(
                "provider crashed: op=%s subject=%s provider=%s latency_ms=%s",
                operation,
                subject,
                attempt.key,
                _elapsed_ms(started),
            )
            return None
        LOGGER.info(
            "provider answered: op=%s subject=%s provider=%s hit=%s latency_ms=%s",
            operation,
            subject,
            attempt.key,
            value is not None,
            _elapsed_ms(started),
        )
        return value

    def _bench_if_needed(self, provider: str, error: ProviderError) -> None:
        if self.is_rate_limited(error):
            reason = "rate_limit"
            seconds = self._cool_down_overrides.get(provider, RATE_LIMIT_COOL_DOWN_SECONDS)
        elif error.code == "AUTH":
            reason = "auth"
            seconds = AUTH_COOL_DOWN_SECONDS
        else:
            return
        until = self._status.disable_provider(provider, seconds, reason=reason)
        LOGGER.warning("provider benched: provider=%s reason=%s until=%s", provider, reason, until)

    @staticmethod
    def is_rate_limited(error: ProviderError) -> bool:
        if error.code == "RATE_LIMIT" or error.status == 429:
            return True
        text = (error.message or "").lower()
        return any(hint in text for hint in QUOTA_HINTS)
