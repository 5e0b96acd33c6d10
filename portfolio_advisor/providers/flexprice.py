"""Flexprice usage-event sink."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

from portfolio_advisor.providers.http import fetch_json, post_json

FLEXPRICE_BASE_URL = "https://api.flexprice.io/v1"


class FlexpriceClient:
    def __init__(self, api_key: str, timeout_seconds: float = 10.0) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def track_event(self, event_type: str, metadata: dict[str, Any] | None = None, user_id: str | None = None) -> Any:
        payload = {
            "event_type": event_type,
            "user_id": user_id or "anonymous",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "metadata": metadata or {},
        }
        return post_json(
            f"{FLEXPRICE_BASE_URL}/events",
            provider="flexprice",
            payload=payload,
            timeout_seconds=self.timeout_seconds,
            headers=self._headers(),
        )

    def get_usage_stats(self, user_id: str | None = None) -> dict[str, Any] | None:
        query = f"?{urlencode({'user_id': user_id})}" if user_id else ""
        data = fetch_json(
            f"{FLEXPRICE_BASE_URL}/usage{query}",
            provider="flexprice",
            timeout_seconds=self.timeout_seconds,
            headers=self._headers(),
            max_retries=1,
        )
        return data if isinstance(data, dict) else None
