"""Typed portfolio models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Action = Literal["BUY", "SELL", "HOLD"]
Confidence = Literal["HIGH", "MEDIUM", "LOW"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH"]
DataSource = Literal["live", "demo"]


@dataclass
class ValidationIssue:
    field: str
    message: str
    row: int | None = None
    code: str = "invalid_value"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"field": self.field, "code": self.code, "message": self.message}
        if self.row is not None:
            payload["row"] = self.row
        return payload


class InvalidInput(ValueError):
    """Request payload or holdings that cannot be analyzed."""

    def __init__(self, issues: list[ValidationIssue] | str) -> None:
        if isinstance(issues, str):
            issues = [ValidationIssue(field="portfolio", code="invalid_payload", message=issues)]
        self.issues = list(issues)
        super().__init__(self.issues[0].message if self.issues else "Invalid portfolio data")


class EmptyPortfolio(ValueError):
    """No holding could be matched to a quote."""

    def __init__(self, message: str = "No valid stock quotes found") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Holding:
    symbol: str
    shares: float


@dataclass(frozen=True)
class Quote:
    symbol: str
    current_price: float
    previous_close: float
    market_cap: float = 0.0
    pe_ratio: float | None = None
    sector: str | None = None


@dataclass(frozen=True)
class ValuedStock:
    symbol: str
    shares: float
    current_price: float
    previous_close: float
    market_cap: float
    pe_ratio: float
    sector: str
    value: float
    prior_value: float
    price_change_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "shares": self.shares,
            "currentPrice": self.current_price,
            "previousClose": self.previous_close,
            "marketCap": self.market_cap,
            "peRatio": self.pe_ratio,
            "sector": self.sector,
            "value": self.value,
            "priceChangePercent": self.price_change_percent,
        }


@dataclass(frozen=True)
class Portfolio:
    stocks: tuple[ValuedStock, ...]
    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "stocks": [stock.to_dict() for stock in self.stocks],
            "totalValue": self.total_value,
            "totalGainLoss": self.total_gain_loss,
            "totalGainLossPercent": self.total_gain_loss_percent,
        }


@dataclass(frozen=True)
class StockAdvice:
    symbol: str
    action: Action
    confidence: Confidence
    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "action": self.action,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class PortfolioAnalysis:
    portfolio: Portfolio
    individual_advice: tuple[StockAdvice, ...]
    overall_advice: str
    diversification_score: int
    risk_level: RiskLevel
    key_insights: tuple[str, ...]
    average_pe: float
    tech_weight: float
    sector_breakdown: dict[str, float] = field(default_factory=dict)
    data_source: DataSource = "live"

    def to_dict(self) -> dict[str, Any]:
        return {
            "portfolio": self.portfolio.to_dict(),
            "individualAdvice": [advice.to_dict() for advice in self.individual_advice],
            "overallAdvice": self.overall_advice,
            "diversificationScore": self.diversification_score,
            "riskLevel": self.risk_level,
            "keyInsights": list(self.key_insights),
            "sectorBreakdown": dict(self.sector_breakdown),
            "averagePE": self.average_pe,
            "techWeight": self.tech_weight,
            "dataSource": self.data_source,
        }
