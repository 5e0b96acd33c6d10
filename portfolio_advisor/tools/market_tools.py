"""Market-listing MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from portfolio_advisor.runtime.response import success_response
from portfolio_advisor.services.base import ServiceResult

if TYPE_CHECKING:
    from portfolio_advisor.tools.registry import ToolServices

MAX_SEARCH_RESULTS = 25


def _respond(result: ServiceResult[Any], empty_message: str) -> str:
    """Serialize a provider result, surfacing an exhausted chain as a tool error."""
    if result.data is None:
        if result.error:
            raise ValueError(f"[{result.error.code}] {result.error.message}")
        raise ValueError(empty_message)
    return success_response(result)


def register_market_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description="List today's market movers: kind is gainers, losers or actives.")
    def get_market_movers(kind: str = "gainers") -> str:
        result = services.market.get_movers(kind.strip().lower())
        return _respond(result, "No market movers available.")

    @mcp.tool(description="Search symbols by ticker or company name.")
    def search_stocks(query: str, limit: int = 10) -> str:
        if not query.strip():
            raise ValueError("query is required.")
        result = services.quotes.search(query, limit=max(1, min(limit, MAX_SEARCH_RESULTS)))
        return _respond(result, "No matching symbols.")
