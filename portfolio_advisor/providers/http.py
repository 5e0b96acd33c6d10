"""Shared `requests` session, retry policy and provider error mapping."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Literal

import requests
from requests.adapters import HTTPAdapter

from portfolio_advisor.providers.models import ProviderName

ProviderErrorCode = Literal["RATE_LIMIT", "AUTH", "NOT_FOUND", "UPSTREAM", "NETWORK", "BAD_RESPONSE"]

_SESSION = requests.Session()
for _scheme in ("https://", "http://"):
    _SESSION.mount(_scheme, HTTPAdapter(pool_connections=20, pool_maxsize=50))


@dataclass
class ProviderError(Exception):
    provider: ProviderName
    code: ProviderErrorCode
    message: str
    status: int | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff; only transient statuses and network errors retry."""

    attempts: int = 2
    base_delay_seconds: float = 0.25
    transient_statuses: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})

    def delay(self, attempt: int) -> float:
        return self.base_delay_seconds * (2 ** (attempt - 1))

    def should_retry(self, attempt: int, error: ProviderError) -> bool:
        if attempt >= max(1, self.attempts):
            return False
        return error.code == "NETWORK" or error.status in self.transient_statuses


def map_status_to_code(status: int) -> ProviderErrorCode:
    if status in {401, 403}:
        return "AUTH"
    if status == 404:
        return "NOT_FOUND"
    if status == 429:
        return "RATE_LIMIT"
    return "UPSTREAM"


def _decode(response: requests.Response, provider: ProviderName) -> Any:
    status = response.status_code
    if not response.ok:
        raise ProviderError(provider, map_status_to_code(status), f"Provider request failed with status {status}.", status)
    if not response.text:
        return {}
    try:
        return json.loads(response.text)
    except json.JSONDecodeError as error:
        raise ProviderError(provider, "BAD_RESPONSE", "Provider returned non-JSON content.", status) from error


def _send_with_retry(send: Callable[[], requests.Response], provider: ProviderName, policy: RetryPolicy) -> Any:
    attempt = 1
    while True:
        try:
            try:
                response = send()
            except requests.RequestException as error:
                raise ProviderError(provider, "NETWORK", "Provider request failed due to network error.") from error
            return _decode(response, provider)
        except ProviderError as error:
            if not policy.should_retry(attempt, error):
                raise
            time.sleep(policy.delay(attempt))
            attempt += 1


def fetch_json(
    url: str,
    provider: ProviderName,
    timeout_seconds: float = 15.0,
    headers: dict[str, str] | None = None,
    max_retries: int = 2,
) -> Any:
    """GET and decode JSON, mapping failures to `ProviderError`."""
    return _send_with_retry(
        lambda: _SESSION.get(url, timeout=timeout_seconds, headers=headers),
        provider,
        RetryPolicy(attempts=max_retries),
    )


def post_json(
    url: str,
    provider: ProviderName,
    payload: dict[str, Any],
    timeout_seconds: float = 15.0,
    headers: dict[str, str] | None = None,
    max_retries: int = 1,
) -> Any:
    merged = {"content-type": "application/json", **(headers or {})}
    body = json.dumps(payload)
    return _send_with_retry(
        lambda: _SESSION.post(url, timeout=timeout_seconds, headers=merged, data=body),
        provider,
        RetryPolicy(attempts=max_retries),
    )
