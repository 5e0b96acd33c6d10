"""Market listing service: gainers, losers and most active symbols."""

from __future__ import annotations

from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.providers.fmp import FmpClient
from portfolio_advisor.providers.models import MoverKind, NormalizedMover
from portfolio_advisor.services.base import ServiceContext, ServiceResult, run_with_cache
from portfolio_advisor.services.fallback_manager import ProviderAttempt
from portfolio_advisor.services.quote_service import QuoteService

MOVER_KINDS: tuple[MoverKind, ...] = ("gainers", "losers", "actives")
MOVERS_LIMIT = 10


class MarketService:
    def __init__(self, ctx: ServiceContext, quotes: QuoteService) -> None:
        self.ctx = ctx
        self.quotes = quotes

    def _fmp(self) -> FmpClient | None:
        c = self.ctx.get_provider("fmp")
        return c if isinstance(c, FmpClient) else None

    def _demo(self) -> DemoMarketData | None:
        c = self.ctx.get_provider("demo")
        return c if isinstance(c, DemoMarketData) else None

    def _live_movers(self, kind: MoverKind) -> list[NormalizedMover] | None:
        fmp = self._fmp()
        if not fmp:
            return None
        movers = fmp.get_movers(kind)
        return movers[:MOVERS_LIMIT] if movers else None

    def _demo_movers(self, kind: MoverKind) -> list[NormalizedMover] | None:
        demo = self._demo()
        return demo.get_movers(kind)[:MOVERS_LIMIT] if demo else None

    def get_movers(self, kind: str) -> ServiceResult[list[NormalizedMover]]:
        if kind not in MOVER_KINDS:
            raise ValueError(f"kind must be one of: {', '.join(MOVER_KINDS)}.")
        mover_kind: MoverKind = kind  # type: ignore[assignment]
        return run_with_cache(
            self.ctx,
            f"market:movers:{mover_kind}",
            lambda: self.quotes.fallback_manager.execute(
                operation=f"get_{mover_kind}",
                subject=mover_kind,
                attempts=[
                    ProviderAttempt("fmp", "FMP", lambda: self._live_movers(mover_kind)),
                    ProviderAttempt("demo", "Demo data", lambda: self._demo_movers(mover_kind)),
                ],
            ),
        )
