"""Portfolio-domain MCP tools."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from portfolio_advisor.portfolio.models import EmptyPortfolio, InvalidInput
from portfolio_advisor.runtime.response import error_response, payload_response

if TYPE_CHECKING:
    from portfolio_advisor.tools.registry import ToolServices


def _load_json(text: str, label: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError as error:
        raise ValueError(f"{label} must be valid JSON.") from error


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    @mcp.tool(description='Analyze holdings given as JSON, e.g. [{"symbol": "AAPL", "shares": 10}].')
    def analyze_portfolio(holdings_json: str) -> str:
        holdings = _load_json(holdings_json, "holdings_json")
        payload = holdings if isinstance(holdings, dict) else {"portfolio": holdings}
        try:
            analysis = services.portfolio.analyze(payload)
        except InvalidInput as error:
            return error_response("INVALID_INPUT", str(error))
        except EmptyPortfolio as error:
            return error_response("EMPTY_PORTFOLIO", str(error))
        services.usage.track("portfolio_analysis", {"holdings": len(analysis["portfolio"]["stocks"])})
        return payload_response(analysis)

    @mcp.tool(description="Suggest stocks from sectors the portfolio under-represents.")
    def suggest_stocks(
        current_stocks_json: str = "[]",
        risk_level: str = "MEDIUM",
        diversification_score: float = 0,
    ) -> str:
        current = _load_json(current_stocks_json, "current_stocks_json")
        payload = services.portfolio.suggest(
            {
                "currentStocks": current if isinstance(current, list) else [],
                "riskLevel": risk_level,
                "diversificationScore": diversification_score,
            }
        )
        return payload_response(payload)

    @mcp.tool(description="Short narrative insight for one symbol.")
    def get_stock_insight(symbol: str) -> str:
        return payload_response(services.portfolio.stock_insight(symbol))
