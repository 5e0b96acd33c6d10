"""Request payload validation for portfolio endpoints."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from portfolio_advisor.portfolio.models import Holding, InvalidInput, ValidationIssue
from portfolio_advisor.services.base import validate_symbol

INVALID_PORTFOLIO_MESSAGE = "Invalid portfolio data"


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)) and not (isinstance(value, str) and value.strip()):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_holdings(payload: Any) -> list[Holding]:
    """Read `portfolio` (or legacy `stocks`) rows; zero-share rows are dropped."""
    rows = None
    if isinstance(payload, dict):
        rows = payload.get("portfolio")
        if rows is None:
            rows = payload.get("stocks")
    if not isinstance(rows, list):
        raise InvalidInput(INVALID_PORTFOLIO_MESSAGE)

    holdings: list[Holding] = []
    issues: list[ValidationIssue] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            issues.append(ValidationIssue(field="portfolio", row=idx, code="invalid_row", message="Each holding must be an object."))
            continue
        raw_symbol = row.get("symbol")
        try:
            symbol = validate_symbol(raw_symbol if isinstance(raw_symbol, str) else "")
        except ValueError:
            issues.append(
                ValidationIssue(field="symbol", row=idx, code="invalid_symbol", message=f"Invalid ticker: {raw_symbol}")
            )
            continue
        shares = _as_number(row.get("shares"))
        if shares is None or shares < 0:
            issues.append(
                ValidationIssue(
                    field="shares",
                    row=idx,
                    code="invalid_shares",
                    message=f"Shares for {symbol} must be a non-negative number.",
                )
            )
            continue
        if shares == 0:
            continue
        holdings.append(Holding(symbol=symbol, shares=shares))

    if issues:
        raise InvalidInput(issues)
    return holdings


@dataclass(frozen=True)
class SuggestionRequest:
    held_sectors: list[str]
    held_symbols: list[str]
    risk_level: str | None
    diversification_score: float


def parse_suggestion_request(payload: Any) -> SuggestionRequest:
    """Lenient parse; malformed parts degrade to empty values instead of failing."""
    body = payload if isinstance(payload, dict) else {}
    rows = body.get("currentStocks")
    sectors: list[str] = []
    symbols: list[str] = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        if isinstance(row.get("symbol"), str) and row["symbol"].strip():
            symbols.append(row["symbol"].strip().upper())
        if isinstance(row.get("sector"), str) and row["sector"].strip():
            sectors.append(row["sector"].strip())
    risk = body.get("riskLevel")
    score = _as_number(body.get("diversificationScore"))
    return SuggestionRequest(
        held_sectors=sectors,
        held_symbols=symbols,
        risk_level=risk.strip().upper() if isinstance(risk, str) else None,
        diversification_score=score if score is not None else 0.0,
    )
