"""Portfolio scoring and summary generation."""

from __future__ import annotations

from typing import Any

from portfolio_advisor.portfolio.models import Portfolio, RiskLevel

SECTOR_SCORE_STEP = 20
MAX_DIVERSIFICATION_SCORE = 100
HIGH_RISK_PE = 40.0
HIGH_RISK_TECH_WEIGHT = 80.0
LOW_RISK_PE = 25.0
LOW_RISK_DIVERSIFICATION = 60
TECH_CONCENTRATION_WEIGHT = 70.0
MIN_DIVERSIFIED_HOLDINGS = 5
PROFIT_TAKING_PERCENT = 20.0
UNDERPERFORMANCE_PERCENT = -10.0
REBALANCE_HOLDINGS = 8

TECH_CONCENTRATION_INSIGHT = (
    "Portfolio is heavily concentrated in technology sector. Consider diversifying into other sectors."
)
LIMITED_DIVERSIFICATION_INSIGHT = (
    "Portfolio has limited diversification. Consider adding more stocks across different sectors."
)
PROFIT_TAKING_INSIGHT = "Strong portfolio performance. Consider taking some profits and rebalancing."
UNDERPERFORMANCE_INSIGHT = "Portfolio is underperforming. Review individual positions and consider adjustments."


def compute_diversification_score(distinct_sectors: int) -> int:
    return min(MAX_DIVERSIFICATION_SCORE, max(0, distinct_sectors) * SECTOR_SCORE_STEP)


def classify_risk(average_pe: float, tech_weight: float, diversification_score: int) -> RiskLevel:
    """HIGH is checked before LOW; both can hold for the same inputs."""
    if average_pe > HIGH_RISK_PE or tech_weight > HIGH_RISK_TECH_WEIGHT:
        return "HIGH"
    if average_pe < LOW_RISK_PE and diversification_score > LOW_RISK_DIVERSIFICATION:
        return "LOW"
    return "MEDIUM"


def build_key_insights(tech_weight: float, holding_count: int, total_gain_loss_percent: float) -> list[str]:
    insights: list[str] = []
    if tech_weight > TECH_CONCENTRATION_WEIGHT:
        insights.append(TECH_CONCENTRATION_INSIGHT)
    if holding_count < MIN_DIVERSIFIED_HOLDINGS:
        insights.append(LIMITED_DIVERSIFICATION_INSIGHT)
    if total_gain_loss_percent > PROFIT_TAKING_PERCENT:
        insights.append(PROFIT_TAKING_INSIGHT)
    elif total_gain_loss_percent < UNDERPERFORMANCE_PERCENT:
        insights.append(UNDERPERFORMANCE_INSIGHT)
    return insights


def generate_overall_advice(
    risk_level: RiskLevel,
    average_pe: float,
    diversification_score: int,
    holding_count: int,
) -> str:
    if risk_level == "HIGH":
        return (
            f"Your portfolio shows high risk with an average P/E of {average_pe:.1f}. "
            "Consider diversifying across more sectors and adding defensive stocks to reduce volatility."
        )
    if risk_level == "LOW":
        return (
            f"Your portfolio is well-balanced with good diversification (score: {diversification_score}/100). "
            "Maintain current allocation and monitor individual positions regularly."
        )
    next_step = "adding more positions" if holding_count < REBALANCE_HOLDINGS else "rebalancing"
    return (
        f"Your portfolio has moderate risk. With {holding_count} holdings and {diversification_score}/100 "
        f"diversification score, consider {next_step} to optimize returns."
    )


def build_advice_summary(
    portfolio: Portfolio,
    diversification_score: int,
    risk_level: RiskLevel,
) -> dict[str, Any]:
    """Structured snapshot handed to narrators; carries no derived advice text."""
    return {
        "stocks": [
            {
                "symbol": stock.symbol,
                "shares": stock.shares,
                "currentPrice": stock.current_price,
                "changePercent": stock.price_change_percent,
                "sector": stock.sector,
                "pe": stock.pe_ratio,
            }
            for stock in portfolio.stocks
        ],
        "totalValue": portfolio.total_value,
        "totalGainLoss": portfolio.total_gain_loss,
        "totalGainLossPercent": portfolio.total_gain_loss_percent,
        "diversificationScore": diversification_score,
        "riskLevel": risk_level,
    }
