"""Sector-gap stock suggestions."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Protocol

from portfolio_advisor.portfolio.models import DataSource

LOGGER = logging.getLogger(__name__)
MAX_SUGGESTIONS = 5
MAX_GAP_SECTORS = 3
CANDIDATES_PER_SECTOR = 2
MIN_CANDIDATES = 3
BACKFILL_SECTOR = "Technology"


class LiveQuote(Protocol):
    price: float
    change: float
    percent_change: float


QuoteLookup = Callable[[list[str]], Mapping[str, LiveQuote]]

# Declaration order decides which under-represented sectors are picked first.
SECTOR_CATALOG: Mapping[str, tuple[tuple[str, str], ...]] = MappingProxyType(
    {
        "Technology": (
            ("AAPL", "Apple Inc."),
            ("MSFT", "Microsoft Corporation"),
            ("GOOGL", "Alphabet Inc."),
            ("NVDA", "NVIDIA Corporation"),
            ("AMD", "Advanced Micro Devices"),
            ("CRM", "Salesforce Inc."),
            ("ADBE", "Adobe Inc."),
            ("INTC", "Intel Corporation"),
        ),
        "Healthcare": (
            ("JNJ", "Johnson & Johnson"),
            ("UNH", "UnitedHealth Group"),
            ("PFE", "Pfizer Inc."),
            ("ABBV", "AbbVie Inc."),
            ("TMO", "Thermo Fisher Scientific"),
            ("MRK", "Merck & Co."),
        ),
        "Finance": (
            ("JPM", "JPMorgan Chase & Co."),
            ("BAC", "Bank of America Corp"),
            ("WFC", "Wells Fargo & Company"),
            ("GS", "Goldman Sachs Group"),
            ("V", "Visa Inc."),
            ("MA", "Mastercard Inc."),
        ),
        "Consumer Cyclical": (
            ("AMZN", "Amazon.com Inc."),
            ("TSLA", "Tesla, Inc."),
            ("HD", "Home Depot Inc."),
            ("NKE", "Nike Inc."),
            ("MCD", "McDonald's Corporation"),
            ("SBUX", "Starbucks Corporation"),
        ),
        "Energy": (
            ("XOM", "Exxon Mobil Corporation"),
            ("CVX", "Chevron Corporation"),
            ("COP", "ConocoPhillips"),
            ("SLB", "Schlumberger NV"),
        ),
        "Industrials": (
            ("BA", "Boeing Company"),
            ("CAT", "Caterpillar Inc."),
            ("GE", "General Electric"),
            ("UPS", "United Parcel Service"),
        ),
    }
)


@dataclass(frozen=True)
class Suggestion:
    symbol: str
    name: str
    sector: str
    price: float
    change: float
    changes_percentage: float
    reason: str
    is_placeholder: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change": self.change,
            "changesPercentage": self.changes_percentage,
            "sector": self.sector,
            "reason": self.reason,
        }
        if self.is_placeholder:
            payload["isPlaceholder"] = True
        return payload


@dataclass(frozen=True)
class SuggestionResult:
    suggestions: tuple[Suggestion, ...]
    reasoning: str
    data_source: DataSource

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggestions": [item.to_dict() for item in self.suggestions],
            "reasoning": self.reasoning,
            "count": len(self.suggestions),
            "dataSource": self.data_source,
        }


FALLBACK_SUGGESTIONS = SuggestionResult(
    suggestions=(
        Suggestion("JPM", "JPMorgan Chase & Co.", "Finance", 195.40, 2.10, 1.09, "Blue-chip financial stock for diversification"),
        Suggestion("JNJ", "Johnson & Johnson", "Healthcare", 162.30, 1.50, 0.93, "Defensive healthcare leader"),
        Suggestion("XOM", "Exxon Mobil Corporation", "Energy", 118.70, 0.80, 0.68, "Energy sector exposure"),
    ),
    reasoning="Consider these diversified stocks from different sectors",
    data_source="demo",
)


@dataclass(frozen=True)
class _Candidate:
    symbol: str
    name: str
    sector: str


class SuggestionEngine:
    """Proposes symbols from sectors the portfolio holds at most once.

    `quote_lookup` receives the candidate symbols and returns live quotes for
    whichever it could resolve. Missing quotes become placeholder prices drawn
    from `rng`, so a seeded rng makes the output reproducible.
    """

    def __init__(
        self,
        quote_lookup: QuoteLookup | None = None,
        catalog: Mapping[str, Iterable[tuple[str, str]]] = SECTOR_CATALOG,
        rng: random.Random | None = None,
    ) -> None:
        self.quote_lookup = quote_lookup
        self.catalog = {sector: tuple(entries) for sector, entries in catalog.items()}
        self.rng = rng or random.Random()

    def suggest(
        self,
        held_sectors: Iterable[str],
        risk_level: str | None = None,
        diversification_score: float = 0,
        exclude_symbols: Iterable[str] = (),
    ) -> SuggestionResult:
        try:
            return self._suggest(held_sectors, risk_level, diversification_score, exclude_symbols)
        except Exception:
            LOGGER.exception("suggestion generation failed; returning static suggestions")
            return FALLBACK_SUGGESTIONS

    def _suggest(
        self,
        held_sectors: Iterable[str],
        risk_level: str | None,
        diversification_score: float,
        exclude_symbols: Iterable[str],
    ) -> SuggestionResult:
        sector_counts = Counter(str(sector) for sector in held_sectors if sector)
        excluded = {str(symbol).strip().upper() for symbol in exclude_symbols}
        candidates = self._select_candidates(sector_counts, excluded)
        quotes = self._lookup([c.symbol for c in candidates])

        suggestions: list[Suggestion] = []
        live_count = 0
        for candidate in candidates[:MAX_SUGGESTIONS]:
            quote = quotes.get(candidate.symbol)
            if quote is not None:
                live_count += 1
                suggestions.append(self._live_suggestion(candidate, quote))
            else:
                suggestions.append(self._placeholder(candidate))

        return SuggestionResult(
            suggestions=tuple(suggestions),
            reasoning=self._reasoning(sector_counts, risk_level, diversification_score),
            data_source="live" if live_count else "demo",
        )

    def _select_candidates(self, sector_counts: Counter[str], excluded: set[str]) -> list[_Candidate]:
        gap_sectors = [sector for sector in self.catalog if sector_counts.get(sector, 0) < 2]
        candidates: list[_Candidate] = []
        for sector in gap_sectors[:MAX_GAP_SECTORS]:
            for symbol, name in self.catalog[sector][:CANDIDATES_PER_SECTOR]:
                if symbol not in excluded:
                    candidates.append(_Candidate(symbol, name, sector))

        if len(candidates) < MIN_CANDIDATES:
            chosen = {c.symbol for c in candidates}
            backfill = [
                _Candidate(symbol, name, BACKFILL_SECTOR)
                for symbol, name in self.catalog.get(BACKFILL_SECTOR, ())
                if symbol not in excluded and symbol not in chosen
            ]
            candidates.extend(backfill[:MIN_CANDIDATES])
        return candidates

    def _lookup(self, symbols: list[str]) -> Mapping[str, LiveQuote]:
        if not symbols or self.quote_lookup is None:
            return {}
        try:
            return self.quote_lookup(symbols) or {}
        except Exception as error:
            LOGGER.warning("suggestion quote lookup failed: error=%s", type(error).__name__)
            return {}

    @staticmethod
    def _live_suggestion(candidate: _Candidate, quote: LiveQuote) -> Suggestion:
        pct = float(quote.percent_change)
        direction = "gaining" if pct >= 0 else "down"
        return Suggestion(
            symbol=candidate.symbol,
            name=candidate.name,
            sector=candidate.sector,
            price=float(quote.price),
            change=float(quote.change),
            changes_percentage=pct,
            reason=f"Diversifies into {candidate.sector} sector - currently {direction} {abs(pct):.2f}%",
        )

    def _placeholder(self, candidate: _Candidate) -> Suggestion:
        return Suggestion(
            symbol=candidate.symbol,
            name=candidate.name,
            sector=candidate.sector,
            price=round(150 + self.rng.random() * 200, 2),
            change=round((self.rng.random() - 0.5) * 10, 2),
            changes_percentage=round((self.rng.random() - 0.5) * 5, 2),
            reason=f"Recommended to diversify into {candidate.sector} sector",
            is_placeholder=True,
        )

    @staticmethod
    def _reasoning(sector_counts: Counter[str], risk_level: str | None, diversification_score: float) -> str:
        if diversification_score < 50:
            top = sector_counts.most_common(1)
            if top:
                sector, count = top[0]
                text = (
                    f"Your portfolio is heavily concentrated in {sector} ({count} stocks). "
                    "These suggestions will help diversify across sectors."
                )
            else:
                text = "These suggestions will help diversify across sectors."
        elif diversification_score < 70:
            text = (
                "Your portfolio has decent diversification. "
                "These stocks from underrepresented sectors can further balance your holdings."
            )
        else:
            text = (
                "Your portfolio is well-diversified. "
                "Consider these top performers to complement your existing positions."
            )
        if risk_level == "HIGH":
            text += " Focus on stable, established companies to balance your risk profile."
        return text
