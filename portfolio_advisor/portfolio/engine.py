"""Deterministic portfolio scoring engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable

from portfolio_advisor.portfolio.analytics_core import (
    build_valuation_frame,
    calculate_average_pe,
    calculate_sector_exposure,
    calculate_sector_weight,
    calculate_total_cost,
    calculate_total_gain_loss_percent,
    calculate_total_portfolio_value,
    count_distinct_sectors,
)
from portfolio_advisor.portfolio.intelligence import (
    build_key_insights,
    classify_risk,
    compute_diversification_score,
    generate_overall_advice,
)
from portfolio_advisor.portfolio.models import (
    Action,
    Confidence,
    DataSource,
    EmptyPortfolio,
    Holding,
    InvalidInput,
    Portfolio,
    PortfolioAnalysis,
    Quote,
    StockAdvice,
    ValidationIssue,
    ValuedStock,
)
from portfolio_advisor.portfolio.sectors import TECHNOLOGY, SectorClassifier
from portfolio_advisor.services.base import validate_symbol

DEFAULT_PE_RATIO = 25.0


@dataclass(frozen=True)
class RuleInput:
    stock: ValuedStock
    weight: float


@dataclass(frozen=True)
class AdviceRule:
    name: str
    applies: Callable[[RuleInput], bool]
    action: Action
    confidence: Confidence
    reasoning: Callable[[RuleInput], str]


# Evaluated top to bottom; the first rule whose predicate holds wins.
ADVICE_RULES: tuple[AdviceRule, ...] = (
    AdviceRule(
        name="overweight",
        applies=lambda r: r.weight > 40,
        action="SELL",
        confidence="HIGH",
        reasoning=lambda r: (
            f"Over-weighted at {r.weight:.1f}% of portfolio. Consider reducing position for better diversification."
        ),
    ),
    AdviceRule(
        name="expensive_after_gain",
        applies=lambda r: r.stock.pe_ratio > 50 and r.stock.price_change_percent > 5,
        action="SELL",
        confidence="MEDIUM",
        reasoning=lambda r: (
            f"High P/E ratio ({r.stock.pe_ratio:.1f}) with recent gains "
            f"({r.stock.price_change_percent:.1f}%). May be overvalued."
        ),
    ),
    AdviceRule(
        name="cheap_after_dip",
        applies=lambda r: r.stock.pe_ratio < 20 and r.stock.price_change_percent < -3,
        action="BUY",
        confidence="HIGH",
        reasoning=lambda r: (
            f"Attractive P/E ratio ({r.stock.pe_ratio:.1f}) with recent dip "
            f"({r.stock.price_change_percent:.1f}%). Good buying opportunity."
        ),
    ),
    AdviceRule(
        name="momentum",
        applies=lambda r: r.stock.price_change_percent > 3,
        action="HOLD",
        confidence="MEDIUM",
        reasoning=lambda r: (
            f"Strong recent performance (+{r.stock.price_change_percent:.1f}%). Monitor for continued momentum."
        ),
    ),
    AdviceRule(
        name="stable",
        applies=lambda r: True,
        action="HOLD",
        confidence="MEDIUM",
        reasoning=lambda r: f"Stable performance. Current position size ({r.weight:.1f}%) is appropriate.",
    ),
)


def evaluate_advice(stock: ValuedStock, total_value: float, rules: tuple[AdviceRule, ...] = ADVICE_RULES) -> StockAdvice:
    weight = (stock.value / total_value) * 100.0 if total_value > 0 else 0.0
    rule_input = RuleInput(stock=stock, weight=weight)
    for rule in rules:
        if rule.applies(rule_input):
            return StockAdvice(
                symbol=stock.symbol,
                action=rule.action,
                confidence=rule.confidence,
                reasoning=rule.reasoning(rule_input),
            )
    raise RuntimeError(f"No advice rule matched {stock.symbol}.")


def _positive_shares(shares: object) -> float | None:
    if isinstance(shares, bool) or not isinstance(shares, (int, float)):
        return None
    try:
        number = float(shares)
    except OverflowError:
        return None
    return number if math.isfinite(number) and number > 0 else None


def _validate_holdings(holdings: Iterable[Holding]) -> list[Holding]:
    clean: list[Holding] = []
    issues: list[ValidationIssue] = []
    for idx, holding in enumerate(holdings):
        try:
            symbol = validate_symbol(holding.symbol)
        except ValueError:
            issues.append(
                ValidationIssue(field="symbol", row=idx, code="invalid_symbol", message=f"Invalid ticker: {holding.symbol}")
            )
            continue
        shares = _positive_shares(holding.shares)
        if shares is None:
            issues.append(
                ValidationIssue(
                    field="shares",
                    row=idx,
                    code="invalid_shares",
                    message=f"Shares for {symbol} must be a positive number.",
                )
            )
            continue
        clean.append(Holding(symbol=symbol, shares=shares))
    if issues:
        raise InvalidInput(issues)
    return clean


def _price_change_percent(current_price: float, previous_close: float) -> float:
    if previous_close == 0:
        return 0.0
    return ((current_price - previous_close) / previous_close) * 100.0


def _pe_or_default(pe_ratio: float | None) -> float:
    if pe_ratio is None or not math.isfinite(pe_ratio) or pe_ratio == 0:
        return DEFAULT_PE_RATIO
    return float(pe_ratio)


class AnalysisEngine:
    """Pure scorer over a holdings list and a quote snapshot.

    Holdings without a matching quote are dropped. Every call builds its own
    valued portfolio, so one engine may serve concurrent requests.
    """

    def __init__(self, classifier: SectorClassifier | None = None) -> None:
        self.classifier = classifier or SectorClassifier()

    def value_holdings(self, holdings: Iterable[Holding], quotes: Iterable[Quote]) -> list[ValuedStock]:
        by_symbol = {quote.symbol.strip().upper(): quote for quote in quotes}
        stocks: list[ValuedStock] = []
        for holding in _validate_holdings(holdings):
            quote = by_symbol.get(holding.symbol)
            if quote is None:
                continue
            sector = self.classifier.classify(holding.symbol)
            stocks.append(
                ValuedStock(
                    symbol=holding.symbol,
                    shares=holding.shares,
                    current_price=quote.current_price,
                    previous_close=quote.previous_close,
                    market_cap=quote.market_cap,
                    pe_ratio=_pe_or_default(quote.pe_ratio),
                    sector=sector,
                    value=quote.current_price * holding.shares,
                    prior_value=quote.previous_close * holding.shares,
                    price_change_percent=_price_change_percent(quote.current_price, quote.previous_close),
                )
            )
        return stocks

    def analyze(
        self,
        holdings: Iterable[Holding],
        quotes: Iterable[Quote],
        *,
        data_source: DataSource = "live",
    ) -> PortfolioAnalysis:
        stocks = self.value_holdings(holdings, quotes)
        if not stocks:
            raise EmptyPortfolio()

        frame = build_valuation_frame(stocks)
        total_value = calculate_total_portfolio_value(frame)
        total_cost = calculate_total_cost(frame)
        total_gain_loss = total_value - total_cost
        portfolio = Portfolio(
            stocks=tuple(stocks),
            total_value=total_value,
            total_cost=total_cost,
            total_gain_loss=total_gain_loss,
            total_gain_loss_percent=calculate_total_gain_loss_percent(total_gain_loss, total_cost),
        )

        advice = tuple(evaluate_advice(stock, total_value) for stock in stocks)
        diversification_score = compute_diversification_score(count_distinct_sectors(frame))
        tech_weight = calculate_sector_weight(frame, TECHNOLOGY)
        average_pe = calculate_average_pe(frame)
        risk_level = classify_risk(average_pe, tech_weight, diversification_score)

        return PortfolioAnalysis(
            portfolio=portfolio,
            individual_advice=advice,
            overall_advice=generate_overall_advice(risk_level, average_pe, diversification_score, len(stocks)),
            diversification_score=diversification_score,
            risk_level=risk_level,
            key_insights=tuple(build_key_insights(tech_weight, len(stocks), portfolio.total_gain_loss_percent)),
            average_pe=average_pe,
            tech_weight=tech_weight,
            sector_breakdown=calculate_sector_exposure(frame),
            data_source=data_source,
        )
