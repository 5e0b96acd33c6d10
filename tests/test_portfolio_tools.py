import asyncio

import pytest
from mcp.server.fastmcp import FastMCP

from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.prompts.portfolio_prompts import register_portfolio_prompts
from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.services.base import ServiceContext
from portfolio_advisor.tools.registry import build_tool_services, register_all_tools
from portfolio_advisor.utils.rate_limit import RateLimiterRegistry


def test_register_all_tools() -> None:
    mcp = FastMCP(name="test-portfolio-tools")
    ctx = ServiceContext(providers={"demo": DemoMarketData()}, cache=TTLCache(), rate_limiter=RateLimiterRegistry(0.0))
    register_all_tools(mcp, build_tool_services(ctx))
    names = {tool.name for tool in asyncio.run(mcp.list_tools())}
    assert names == {"analyze_portfolio", "suggest_stocks", "get_stock_insight", "get_market_movers", "search_stocks"}


def test_portfolio_review_prompt() -> None:
    mcp = FastMCP(name="test-prompts")
    register_portfolio_prompts(mcp)

    prompts = asyncio.run(mcp.list_prompts())
    assert any(prompt.name == "portfolio_review" for prompt in prompts)

    result = asyncio.run(mcp.get_prompt("portfolio_review", {"holdings": "AAPL 10, MSFT 5"}))
    rendered = str(result.messages[0].content.text)
    assert "AAPL 10, MSFT 5" in rendered
    assert "analyze_portfolio" in rendered


def test_portfolio_review_prompt_missing_argument() -> None:
    mcp = FastMCP(name="test-prompts-missing-arg")
    register_portfolio_prompts(mcp)

    with pytest.raises(ValueError, match="Missing required arguments"):
        asyncio.run(mcp.get_prompt("portfolio_review", {}))
