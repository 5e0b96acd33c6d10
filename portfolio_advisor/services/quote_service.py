"""Quote retrieval across live providers with a demo fallback."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.providers.finnhub import FinnhubClient
from portfolio_advisor.providers.fmp import FmpClient
from portfolio_advisor.providers.models import NormalizedQuote, NormalizedSearchResult
from portfolio_advisor.providers.yahoo_finance import YahooFinanceClient
from portfolio_advisor.services.base import ServiceContext, ServiceResult, run_with_cache
from portfolio_advisor.services.fallback_manager import FallbackManager, ProviderAttempt
from portfolio_advisor.services.provider_status import ProviderStatus

LOGGER = logging.getLogger(__name__)
MAX_FANOUT_WORKERS = 8


class QuoteService:
    def __init__(self, ctx: ServiceContext, max_workers: int = MAX_FANOUT_WORKERS) -> None:
        self.ctx = ctx
        self.max_workers = max(1, max_workers)
        status = self.ctx.get_provider("provider_status")
        if not isinstance(status, ProviderStatus):
            status = ProviderStatus()
            self.ctx.providers["provider_status"] = status
        self.provider_status = status
        self.fallback_manager = FallbackManager(ctx=self.ctx, provider_status=status)

    def _fmp(self) -> FmpClient | None:
        client = self.ctx.get_provider("fmp")
        return client if isinstance(client, FmpClient) else None

    def _finnhub(self) -> FinnhubClient | None:
        client = self.ctx.get_provider("finnhub")
        return client if isinstance(client, FinnhubClient) else None

    def _yahoo(self) -> YahooFinanceClient | None:
        client = self.ctx.get_provider("yahoo")
        return client if isinstance(client, YahooFinanceClient) else None

    def _demo(self) -> DemoMarketData | None:
        client = self.ctx.get_provider("demo")
        return client if isinstance(client, DemoMarketData) else None

    def get_quote(self, symbol: str) -> ServiceResult[NormalizedQuote]:
        """One attempt per provider, in order; quotes are request-scoped and never cached."""
        return self.fallback_manager.execute(
            operation="get_quote",
            subject=symbol,
            attempts=[
                ProviderAttempt("fmp", "FMP", lambda: self._fmp().get_quote(symbol) if self._fmp() else None),
                ProviderAttempt("finnhub", "Finnhub", lambda: self._finnhub().get_quote(symbol) if self._finnhub() else None),
                ProviderAttempt("yahoo", "Yahoo Finance", lambda: self._yahoo().get_quote(symbol) if self._yahoo() else None),
                ProviderAttempt("demo", "Demo data", lambda: self._demo().get_quote(symbol) if self._demo() else None),
            ],
        )

    def get_quotes(self, symbols: list[str]) -> dict[str, ServiceResult[NormalizedQuote]]:
        """Fan out one lookup per distinct symbol and join; order of the input is kept."""
        unique = list(dict.fromkeys(symbols))
        if not unique:
            return {}
        workers = min(self.max_workers, len(unique))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="quote") as executor:
            results = list(executor.map(self.get_quote, unique))
        missing = [symbol for symbol, result in zip(unique, results) if result.data is None]
        if missing:
            LOGGER.info("quotes unresolved: symbols=%s", ",".join(missing))
        return dict(zip(unique, results))

    def search(self, query: str, limit: int = 10) -> ServiceResult[list[NormalizedSearchResult]]:
        query_text = query.strip()
        return run_with_cache(
            self.ctx,
            f"quote:search:{query_text.lower()}:{limit}",
            lambda: self.fallback_manager.execute(
                operation="search_symbol",
                subject=query_text,
                attempts=[
                    ProviderAttempt(
                        "finnhub",
                        "Finnhub",
                        lambda: self._finnhub().search_symbols(query_text, limit) if self._finnhub() else None,
                    ),
                    ProviderAttempt(
                        "fmp",
                        "FMP",
                        lambda: self._fmp().search_symbols(query_text, limit) if self._fmp() else None,
                    ),
                    ProviderAttempt(
                        "demo",
                        "Demo data",
                        lambda: self._demo().search_symbols(query_text, limit) if self._demo() else None,
                    ),
                ],
            ),
            ttl_seconds=300,
        )
