"""Yahoo Finance adapter backed by yfinance."""

from __future__ import annotations

import yfinance as yf

from portfolio_advisor.providers.http import ProviderError
from portfolio_advisor.providers.models import NormalizedQuote


def _num(info: dict, *keys: str) -> float | None:
    for key in keys:
        value = info.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    return None


class YahooFinanceClient:
    """Quote adapter that also supplies P/E, market cap and sector from `Ticker.info`."""

    def __init__(self, timeout_seconds: float = 15.0) -> None:
        self.timeout_seconds = timeout_seconds

    def _info(self, symbol: str) -> dict:
        try:
            info = yf.Ticker(symbol).info
        except Exception as error:
            raise ProviderError("yahoo", "UPSTREAM", "Yahoo Finance lookup failed.") from error
        return info if isinstance(info, dict) else {}

    def get_quote(self, symbol: str) -> NormalizedQuote | None:
        info = self._info(symbol)
        price = _num(info, "currentPrice", "regularMarketPrice")
        if price is None or price <= 0:
            return None
        previous_close = _num(info, "previousClose", "regularMarketPreviousClose")
        if previous_close is None or previous_close < 0:
            previous_close = price
        change = price - previous_close
        percent_change = (change / previous_close) * 100.0 if previous_close > 0 else 0.0
        volume = _num(info, "volume", "regularMarketVolume")
        sector = info.get("sector")
        name = info.get("shortName") or info.get("longName")
        return NormalizedQuote(
            symbol=symbol,
            price=price,
            change=change,
            percent_change=percent_change,
            previous_close=previous_close,
            market_cap=_num(info, "marketCap"),
            pe_ratio=_num(info, "trailingPE", "forwardPE"),
            sector=sector if isinstance(sector, str) and sector else None,
            name=name if isinstance(name, str) else None,
            volume=int(volume) if volume is not None else None,
            source="yahoo",
        )
