"""Normalized data models shared across providers and services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ProviderName = Literal[
    "finnhub",
    "fmp",
    "yahoo",
    "demo",
    "anthropic",
    "gemini",
    "flexprice",
]
MoverKind = Literal["gainers", "losers", "actives"]


@dataclass
class NormalizedQuote:
    symbol: str
    price: float
    change: float
    percent_change: float
    previous_close: float
    source: ProviderName
    market_cap: float | None = None
    pe_ratio: float | None = None
    sector: str | None = None
    name: str | None = None
    volume: int | None = None
    timestamp: int | None = None


@dataclass
class NormalizedSearchResult:
    symbol: str
    name: str
    exchange: str | None = None
    source: ProviderName = "finnhub"


@dataclass
class NormalizedMover:
    symbol: str
    name: str
    price: float
    change: float
    percent_change: float
    volume: int | None = None
