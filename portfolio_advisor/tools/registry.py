"""Service bundle construction and MCP tool registration."""

from __future__ import annotations

import random
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from portfolio_advisor.portfolio.engine import AnalysisEngine
from portfolio_advisor.portfolio.narrator import Narrator
from portfolio_advisor.portfolio.portfolio_service import PortfolioService
from portfolio_advisor.portfolio.sectors import SectorClassifier
from portfolio_advisor.services.base import ServiceContext
from portfolio_advisor.services.market_service import MarketService
from portfolio_advisor.services.quote_service import QuoteService
from portfolio_advisor.services.usage_service import UsageService
from portfolio_advisor.tools.market_tools import register_market_tools
from portfolio_advisor.tools.portfolio_tools import register_portfolio_tools


@dataclass
class ToolServices:
    quotes: QuoteService
    market: MarketService
    portfolio: PortfolioService
    usage: UsageService


def build_tool_services(
    ctx: ServiceContext,
    narrator: Narrator | None = None,
    enable_ai_advice: bool = True,
    default_sector: str = "Technology",
    suggestion_seed: int | None = None,
) -> ToolServices:
    quotes = QuoteService(ctx)
    engine = AnalysisEngine(SectorClassifier(default_sector=default_sector))
    portfolio = PortfolioService(
        ctx,
        quotes,
        engine=engine,
        narrator=narrator,
        enable_ai_advice=enable_ai_advice,
        suggestion_rng=random.Random(suggestion_seed),
    )
    return ToolServices(
        quotes=quotes,
        market=MarketService(ctx, quotes),
        portfolio=portfolio,
        usage=UsageService(ctx),
    )


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_portfolio_tools(mcp, services)
    register_market_tools(mcp, services)
