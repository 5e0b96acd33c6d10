"""Finnhub API client with normalized response models."""

from __future__ import annotations

from urllib.parse import urlencode

from portfolio_advisor.providers.http import ProviderError, fetch_json
from portfolio_advisor.providers.models import NormalizedQuote, NormalizedSearchResult

FINNHUB_BASE_URL = "https://finnhub.io/api/v1"


class FinnhubClient:
    """Thin wrapper around the Finnhub quote and search endpoints."""

    def __init__(self, api_key: str, timeout_seconds: float = 15.0) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _request(self, endpoint: str, query: dict[str, str | int | float | None]) -> dict:
        params: dict[str, str | int | float] = {}
        for key, value in query.items():
            if value is not None:
                params[key] = value
        params["token"] = self.api_key
        url = f"{FINNHUB_BASE_URL}{endpoint}?{urlencode(params)}"
        data = fetch_json(url, provider="finnhub", timeout_seconds=self.timeout_seconds)
        if isinstance(data, dict) and data.get("error"):
            text = str(data["error"])
            lower = text.lower()
            if "limit" in lower:
                raise ProviderError("finnhub", "RATE_LIMIT", text)
            if "token" in lower or "auth" in lower:
                raise ProviderError("finnhub", "AUTH", text)
            raise ProviderError("finnhub", "UPSTREAM", text)
        return data if isinstance(data, dict) else {}

    def get_quote(self, symbol: str) -> NormalizedQuote | None:
        data = self._request("/quote", {"symbol": symbol})
        price = data.get("c")
        previous_close = data.get("pc")
        # Finnhub answers unknown symbols with an all-zero quote.
        if not isinstance(price, (int, float)) or price <= 0:
            return None
        if not isinstance(previous_close, (int, float)) or previous_close < 0:
            previous_close = price
        return NormalizedQuote(
            symbol=symbol,
            price=float(price),
            change=float(data.get("d", 0) or 0),
            percent_change=float(data.get("dp", 0) or 0),
            previous_close=float(previous_close),
            timestamp=int(data["t"]) if isinstance(data.get("t"), (int, float)) else None,
            source="finnhub",
        )

    def search_symbols(self, query: str, limit: int = 10) -> list[NormalizedSearchResult] | None:
        data = self._request("/search", {"q": query})
        rows = data.get("result")
        if not isinstance(rows, list) or not rows:
            return None
        out: list[NormalizedSearchResult] = []
        for item in rows[:limit]:
            if not isinstance(item, dict) or not item.get("symbol"):
                continue
            out.append(
                NormalizedSearchResult(
                    symbol=str(item["symbol"]),
                    name=str(item.get("description") or item["symbol"]),
                    exchange=item.get("type") if isinstance(item.get("type"), str) else None,
                    source="finnhub",
                )
            )
        return out or None
