"""Deterministic demo market data used when live providers are unavailable."""

from __future__ import annotations

import random

from portfolio_advisor.providers.models import (
    MoverKind,
    NormalizedMover,
    NormalizedQuote,
    NormalizedSearchResult,
)

# symbol -> (price, previous_close, market_cap, pe_ratio, sector)
DEMO_QUOTES: dict[str, tuple[float, float, float, float, str]] = {
    "AAPL": (185.92, 182.31, 2.85e12, 28.5, "Technology"),
    "TSLA": (248.50, 245.12, 7.91e11, 65.2, "Automotive"),
    "NVDA": (875.30, 862.15, 2.16e12, 73.8, "Technology"),
    "MSFT": (420.15, 418.90, 3.12e12, 32.1, "Technology"),
    "GOOGL": (142.80, 140.25, 1.78e12, 25.4, "Technology"),
    "AMZN": (155.20, 152.75, 1.61e12, 48.9, "Consumer Discretionary"),
    "META": (485.75, 482.30, 1.23e12, 24.7, "Technology"),
    "NFLX": (625.40, 620.85, 2.77e11, 42.3, "Communication Services"),
}

DEMO_MOVERS: dict[MoverKind, list[NormalizedMover]] = {
    "gainers": [
        NormalizedMover("NVDA", "NVIDIA Corporation", 487.50, 15.30, 3.24, 52_000_000),
        NormalizedMover("TSLA", "Tesla, Inc.", 265.80, 8.20, 3.18, 98_000_000),
        NormalizedMover("AMD", "Advanced Micro Devices", 167.40, 5.10, 3.14, 45_000_000),
        NormalizedMover("META", "Meta Platforms Inc.", 498.20, 14.50, 3.00, 18_000_000),
        NormalizedMover("GOOGL", "Alphabet Inc.", 178.30, 5.10, 2.95, 25_000_000),
        NormalizedMover("MSFT", "Microsoft Corporation", 422.40, 11.80, 2.87, 22_000_000),
        NormalizedMover("AMZN", "Amazon.com Inc.", 184.60, 4.90, 2.73, 48_000_000),
        NormalizedMover("AAPL", "Apple Inc.", 185.20, 4.50, 2.49, 51_000_000),
    ],
    "losers": [
        NormalizedMover("INTC", "Intel Corporation", 28.40, -1.20, -4.05, 62_000_000),
        NormalizedMover("PYPL", "PayPal Holdings Inc.", 61.30, -2.40, -3.77, 12_000_000),
        NormalizedMover("SNAP", "Snap Inc.", 10.80, -0.38, -3.40, 28_000_000),
        NormalizedMover("BA", "Boeing Company", 168.20, -5.40, -3.11, 8_900_000),
        NormalizedMover("DIS", "Walt Disney Company", 91.50, -2.80, -2.97, 11_000_000),
        NormalizedMover("COIN", "Coinbase Global Inc.", 184.30, -5.20, -2.74, 5_400_000),
        NormalizedMover("ROKU", "Roku Inc.", 68.90, -1.80, -2.55, 6_700_000),
        NormalizedMover("SQ", "Block Inc.", 64.20, -1.60, -2.43, 9_200_000),
    ],
    "actives": [
        NormalizedMover("TSLA", "Tesla, Inc.", 265.80, 8.20, 3.18, 98_000_000),
        NormalizedMover("AAPL", "Apple Inc.", 185.20, 4.50, 2.49, 51_000_000),
        NormalizedMover("NVDA", "NVIDIA Corporation", 487.50, 15.30, 3.24, 52_000_000),
        NormalizedMover("AMZN", "Amazon.com Inc.", 184.60, 4.90, 2.73, 48_000_000),
        NormalizedMover("AMD", "Advanced Micro Devices", 167.40, 5.10, 3.14, 45_000_000),
        NormalizedMover("INTC", "Intel Corporation", 28.40, -1.20, -4.05, 62_000_000),
        NormalizedMover("SNAP", "Snap Inc.", 10.80, -0.38, -3.40, 28_000_000),
        NormalizedMover("GOOGL", "Alphabet Inc.", 178.30, 5.10, 2.95, 25_000_000),
        NormalizedMover("UBER", "Uber Technologies Inc.", 72.40, -1.70, -2.29, 24_000_000),
        NormalizedMover("MSFT", "Microsoft Corporation", 422.40, 11.80, 2.87, 22_000_000),
    ],
}

DEMO_SEARCH_CATALOG: list[tuple[str, str, str]] = [
    ("AAPL", "Apple Inc.", "NASDAQ"),
    ("GOOGL", "Alphabet Inc.", "NASDAQ"),
    ("MSFT", "Microsoft Corporation", "NASDAQ"),
    ("TSLA", "Tesla, Inc.", "NASDAQ"),
    ("AMZN", "Amazon.com, Inc.", "NASDAQ"),
    ("NVDA", "NVIDIA Corporation", "NASDAQ"),
    ("META", "Meta Platforms, Inc.", "NASDAQ"),
    ("NFLX", "Netflix, Inc.", "NASDAQ"),
]


class DemoMarketData:
    """Fallback adapter with static tables and seedable quote synthesis.

    Symbols in `DEMO_QUOTES` resolve to fixed snapshots. Other symbols listed in
    `known_symbols` get a synthesized quote; anything else is treated as unknown.
    With a seed, each symbol gets its own `random.Random` derived from the seed
    so results do not depend on call order.
    """

    def __init__(self, seed: int | None = None, known_symbols: set[str] | None = None) -> None:
        self.seed = seed
        self._shared_rng = random.Random()
        self.known_symbols = {symbol.upper() for symbol in (known_symbols or set())}
        self.known_symbols.update(DEMO_QUOTES)
        for movers in DEMO_MOVERS.values():
            self.known_symbols.update(mover.symbol for mover in movers)
        self.known_symbols.update(symbol for symbol, _, _ in DEMO_SEARCH_CATALOG)

    def _rng_for(self, symbol: str) -> random.Random:
        if self.seed is None:
            return self._shared_rng
        return random.Random(f"{self.seed}:{symbol}")

    def get_quote(self, symbol: str) -> NormalizedQuote | None:
        key = symbol.upper()
        fixed = DEMO_QUOTES.get(key)
        if fixed:
            price, previous_close, market_cap, pe_ratio, sector = fixed
            change = price - previous_close
            return NormalizedQuote(
                symbol=key,
                price=price,
                change=change,
                percent_change=(change / previous_close) * 100.0,
                previous_close=previous_close,
                market_cap=market_cap,
                pe_ratio=pe_ratio,
                sector=sector,
                source="demo",
            )
        if key not in self.known_symbols:
            return None
        return self.synthesize_quote(key)

    def synthesize_quote(self, symbol: str) -> NormalizedQuote:
        rng = self._rng_for(symbol)
        price = 100.0 + rng.random() * 400.0
        change = (rng.random() - 0.5) * 20.0
        previous_close = price - change
        return NormalizedQuote(
            symbol=symbol,
            price=round(price, 2),
            change=round(change, 2),
            percent_change=round((change / previous_close) * 100.0, 2),
            previous_close=round(previous_close, 2),
            market_cap=float(int(rng.random() * 1e12)),
            pe_ratio=round(rng.random() * 50.0 + 10.0, 1),
            volume=int(rng.random() * 50_000_000) + 1_000_000,
            source="demo",
        )

    def get_movers(self, kind: MoverKind) -> list[NormalizedMover]:
        return list(DEMO_MOVERS[kind])

    def search_symbols(self, query: str, limit: int = 10) -> list[NormalizedSearchResult]:
        needle = query.strip().lower()
        return [
            NormalizedSearchResult(symbol=symbol, name=name, exchange=exchange, source="demo")
            for symbol, name, exchange in DEMO_SEARCH_CATALOG
            if needle in symbol.lower() or needle in name.lower()
        ][:limit]
