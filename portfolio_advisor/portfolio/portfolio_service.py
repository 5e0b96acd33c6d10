"""Portfolio analysis orchestration service."""

from __future__ import annotations

import dataclasses
import logging
import random
from typing import Any

from portfolio_advisor.portfolio.engine import AnalysisEngine
from portfolio_advisor.portfolio.intelligence import build_advice_summary
from portfolio_advisor.portfolio.models import DataSource, EmptyPortfolio, PortfolioAnalysis, Quote
from portfolio_advisor.portfolio.narrator import Narrator, TemplateNarrator
from portfolio_advisor.portfolio.suggestions import SuggestionEngine
from portfolio_advisor.portfolio.validation import parse_holdings, parse_suggestion_request
from portfolio_advisor.providers.models import NormalizedQuote
from portfolio_advisor.services.base import ServiceContext, ServiceResult, validate_symbol
from portfolio_advisor.services.quote_service import QuoteService

LOGGER = logging.getLogger(__name__)


def to_engine_quote(quote: NormalizedQuote) -> Quote:
    return Quote(
        symbol=quote.symbol.upper(),
        current_price=float(quote.price),
        previous_close=float(quote.previous_close),
        market_cap=float(quote.market_cap or 0.0),
        pe_ratio=quote.pe_ratio,
        sector=quote.sector,
    )


def resolve_data_source(results: list[ServiceResult[NormalizedQuote]]) -> DataSource:
    resolved = [result for result in results if result.data is not None]
    if resolved and all(result.is_demo for result in resolved):
        return "demo"
    return "live"


class PortfolioService:
    def __init__(
        self,
        ctx: ServiceContext,
        quotes: QuoteService,
        engine: AnalysisEngine | None = None,
        narrator: Narrator | None = None,
        enable_ai_advice: bool = True,
        suggestions: SuggestionEngine | None = None,
        suggestion_rng: random.Random | None = None,
    ) -> None:
        self.ctx = ctx
        self.quotes = quotes
        self.engine = engine or AnalysisEngine()
        self.narrator = narrator
        self.enable_ai_advice = enable_ai_advice
        self.suggestions = suggestions or SuggestionEngine(quote_lookup=self.live_quotes, rng=suggestion_rng)

    def live_quotes(self, symbols: list[str]) -> dict[str, NormalizedQuote]:
        """Quotes from live providers only; demo answers count as missing."""
        results = self.quotes.get_quotes(symbols)
        return {
            symbol: result.data
            for symbol, result in results.items()
            if result.data is not None and not result.is_demo
        }

    def analyze(self, payload: Any) -> dict[str, Any]:
        holdings = parse_holdings(payload)
        if not holdings:
            raise EmptyPortfolio()
        results = self.quotes.get_quotes([holding.symbol for holding in holdings])
        quotes = [to_engine_quote(result.data) for result in results.values() if result.data is not None]
        analysis = self.engine.analyze(holdings, quotes, data_source=resolve_data_source(list(results.values())))
        LOGGER.info(
            "portfolio analyzed: holdings=%s priced=%s risk=%s data_source=%s",
            len(holdings),
            len(analysis.portfolio.stocks),
            analysis.risk_level,
            analysis.data_source,
        )
        return self._augment_advice(analysis).to_dict()

    def _augment_advice(self, analysis: PortfolioAnalysis) -> PortfolioAnalysis:
        if not self.enable_ai_advice or self.narrator is None:
            return analysis
        summary = build_advice_summary(analysis.portfolio, analysis.diversification_score, analysis.risk_level)
        text = self.narrator.generate_advice(summary)
        if not text:
            return analysis
        return dataclasses.replace(analysis, overall_advice=text)

    def suggest(self, payload: Any) -> dict[str, Any]:
        request = parse_suggestion_request(payload)
        result = self.suggestions.suggest(
            held_sectors=request.held_sectors,
            risk_level=request.risk_level,
            diversification_score=request.diversification_score,
            exclude_symbols=request.held_symbols,
        )
        return result.to_dict()

    def stock_insight(self, symbol: str) -> dict[str, Any]:
        clean = validate_symbol(symbol)
        result = self.quotes.get_quote(clean)
        if result.data is None:
            message = result.error.message if result.error else "No quote available."
            raise ValueError(message)
        quote = result.data
        snapshot = {
            "price": quote.price,
            "changePercent": quote.percent_change,
            "sector": self.engine.classifier.classify(clean),
            "pe": quote.pe_ratio,
            "marketCap": quote.market_cap,
        }
        narrator = self.narrator if self.enable_ai_advice and self.narrator is not None else TemplateNarrator()
        return {
            "symbol": clean,
            "insight": narrator.generate_insight(clean, snapshot),
            "quote": snapshot,
            "dataSource": "demo" if result.is_demo else "live",
        }
