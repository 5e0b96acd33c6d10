"""Portfolio prompt definitions."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP


def _build_portfolio_review_prompt(holdings: str) -> str:
    holdings_text = holdings.strip()
    if not holdings_text:
        raise ValueError("Missing required argument: holdings.")
    return (
        "You are a portfolio reviewer for a beginner investor.\n"
        f"Holdings: {holdings_text}\n"
        "Call the analyze_portfolio tool with these holdings, then explain:\n"
        "1) Which positions the rules flag to buy, sell or hold, and why\n"
        "2) What the diversification score and risk level mean\n"
        "3) Which sectors are missing (use suggest_stocks)\n"
        "Keep it short and encouraging. This is not financial advice."
    )


def register_portfolio_prompts(mcp: FastMCP) -> None:
    @mcp.prompt(
        name="portfolio_review",
        title="Portfolio Review Prompt",
        description="Walk through a rule-based review of a holdings list.",
    )
    def portfolio_review(holdings: str) -> str:
        return _build_portfolio_review_prompt(holdings)
