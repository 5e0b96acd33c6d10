"""Financial Modeling Prep adapter."""

from __future__ import annotations

from urllib.parse import quote_plus

from portfolio_advisor.providers.http import fetch_json
from portfolio_advisor.providers.models import (
    MoverKind,
    NormalizedMover,
    NormalizedQuote,
    NormalizedSearchResult,
)

FMP_MOVER_PATHS: dict[MoverKind, str] = {
    "gainers": "/stock_market/gainers",
    "losers": "/stock_market/losers",
    "actives": "/stock_market/actives",
}


class FmpClient:
    def __init__(self, api_key: str, timeout_seconds: float = 15.0) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.base = "https://financialmodelingprep.com/api/v3"

    def _get(self, path: str) -> object:
        sep = "&" if "?" in path else "?"
        url = f"{self.base}{path}{sep}apikey={self.api_key}"
        return fetch_json(
            url,
            provider="fmp",
            timeout_seconds=self.timeout_seconds,
            headers={"apikey": self.api_key},
        )

    @staticmethod
    def _as_float(value: object) -> float | None:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def _to_quote(self, item: dict) -> NormalizedQuote | None:
        symbol = item.get("symbol")
        price = self._as_float(item.get("price"))
        if not isinstance(symbol, str) or price is None or price <= 0:
            return None
        volume = item.get("volume")
        return NormalizedQuote(
            symbol=symbol.upper(),
            price=price,
            change=self._as_float(item.get("change")) or 0.0,
            percent_change=self._as_float(item.get("changesPercentage")) or 0.0,
            previous_close=self._as_float(item.get("previousClose")) or price,
            market_cap=self._as_float(item.get("marketCap")),
            pe_ratio=self._as_float(item.get("pe")),
            name=item.get("name") if isinstance(item.get("name"), str) else None,
            volume=int(volume) if isinstance(volume, (int, float)) else None,
            timestamp=int(item["timestamp"]) if isinstance(item.get("timestamp"), (int, float)) else None,
            source="fmp",
        )

    def get_quote(self, symbol: str) -> NormalizedQuote | None:
        data = self._get(f"/quote/{quote_plus(symbol)}")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        return self._to_quote(data[0])

    def search_symbols(self, query: str, limit: int = 10) -> list[NormalizedSearchResult] | None:
        data = self._get(f"/search?query={quote_plus(query)}&limit={int(limit)}")
        if not isinstance(data, list) or not data:
            return None
        out = [
            NormalizedSearchResult(
                symbol=str(item["symbol"]),
                name=str(item.get("name") or item["symbol"]),
                exchange=item.get("exchangeShortName") if isinstance(item.get("exchangeShortName"), str) else None,
                source="fmp",
            )
            for item in data[:limit]
            if isinstance(item, dict) and item.get("symbol")
        ]
        return out or None

    def get_movers(self, kind: MoverKind) -> list[NormalizedMover] | None:
        data = self._get(FMP_MOVER_PATHS[kind])
        if not isinstance(data, list) or not data:
            return None
        movers: list[NormalizedMover] = []
        for item in data:
            if not isinstance(item, dict) or not item.get("symbol"):
                continue
            price = self._as_float(item.get("price"))
            if price is None:
                continue
            volume = item.get("volume")
            movers.append(
                NormalizedMover(
                    symbol=str(item["symbol"]),
                    name=str(item.get("name") or item["symbol"]),
                    price=price,
                    change=self._as_float(item.get("change")) or 0.0,
                    percent_change=self._as_float(item.get("changesPercentage")) or 0.0,
                    volume=int(volume) if isinstance(volume, (int, float)) else None,
                )
            )
        return movers or None
