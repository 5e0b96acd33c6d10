"""Static symbol to sector classification."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

TECHNOLOGY = "Technology"

DEFAULT_SECTOR_MAP: Mapping[str, str] = MappingProxyType(
    {
        "AAPL": "Technology",
        "MSFT": "Technology",
        "GOOGL": "Technology",
        "AMZN": "Consumer Cyclical",
        "TSLA": "Automotive",
        "NVDA": "Technology",
        "META": "Technology",
        "NFLX": "Communication Services",
        "JPM": "Financial",
        "BAC": "Financial",
        "WMT": "Consumer Defensive",
        "PG": "Consumer Defensive",
        "JNJ": "Healthcare",
        "UNH": "Healthcare",
        "XOM": "Energy",
        "CVX": "Energy",
    }
)


class SectorClassifier:
    """Maps ticker symbols to sector labels.

    Unknown symbols get `default_sector`. The lookup table is copied into a
    read-only mapping at construction, so one instance can be shared across
    request threads.
    """

    def __init__(self, mapping: Mapping[str, str] | None = None, default_sector: str = TECHNOLOGY) -> None:
        source = DEFAULT_SECTOR_MAP if mapping is None else mapping
        self._mapping: Mapping[str, str] = MappingProxyType(
            {str(symbol).strip().upper(): sector for symbol, sector in source.items()}
        )
        self.default_sector = default_sector.strip() or TECHNOLOGY

    @property
    def mapping(self) -> Mapping[str, str]:
        return self._mapping

    def classify(self, symbol: str) -> str:
        return self._mapping.get(str(symbol).strip().upper(), self.default_sector)

    def is_known(self, symbol: str) -> bool:
        return str(symbol).strip().upper() in self._mapping
