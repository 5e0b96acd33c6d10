import random

import pytest

from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.portfolio.models import EmptyPortfolio, InvalidInput
from portfolio_advisor.portfolio.narrator import FallbackNarrator, LlmNarrator
from portfolio_advisor.portfolio.portfolio_service import PortfolioService, resolve_data_source
from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.providers.fmp import FmpClient
from portfolio_advisor.providers.models import NormalizedQuote
from portfolio_advisor.services.base import ServiceContext, ServiceResult
from portfolio_advisor.services.quote_service import QuoteService
from portfolio_advisor.utils.rate_limit import RateLimiterRegistry

HOLDINGS = {"portfolio": [{"symbol": "AAPL", "shares": 50}, {"symbol": "TSLA", "shares": 25}]}


class _StubNarrator:
    def __init__(self, text: str) -> None:
        self.text = text
        self.summaries = []

    def generate_advice(self, summary):
        self.summaries.append(summary)
        return self.text

    def generate_insight(self, symbol, snapshot):
        return f"{symbol} insight"


def _service(narrator=None, enable_ai_advice=True, **providers) -> PortfolioService:
    providers.setdefault("demo", DemoMarketData())
    ctx = ServiceContext(providers=providers, cache=TTLCache(), rate_limiter=RateLimiterRegistry(0.0))
    return PortfolioService(
        ctx,
        QuoteService(ctx),
        narrator=narrator,
        enable_ai_advice=enable_ai_advice,
        suggestion_rng=random.Random(0),
    )


def test_analyze_with_demo_quotes_reports_demo_source() -> None:
    result = _service().analyze(HOLDINGS)
    assert result["dataSource"] == "demo"
    assert [stock["symbol"] for stock in result["portfolio"]["stocks"]] == ["AAPL", "TSLA"]
    assert result["portfolio"]["totalValue"] == pytest.approx(50 * 185.92 + 25 * 248.50)
    assert len(result["individualAdvice"]) == 2


def test_analyze_with_live_quotes_reports_live_source(monkeypatch) -> None:
    fmp = FmpClient("k")
    monkeypatch.setattr(
        fmp,
        "get_quote",
        lambda symbol: NormalizedQuote(symbol, 100.0, 1.0, 1.0, 99.0, "fmp", pe_ratio=20.0, sector="Oil & Gas"),
    )
    result = _service(fmp=fmp).analyze({"portfolio": [{"symbol": "XOM", "shares": 10}]})
    assert result["dataSource"] == "live"
    assert result["portfolio"]["stocks"][0]["sector"] == "Energy"


def test_sector_comes_from_classifier_not_quote() -> None:
    result = _service().analyze({"portfolio": [{"symbol": "AMZN", "shares": 1}]})
    assert result["portfolio"]["stocks"][0]["sector"] == "Consumer Cyclical"
    assert result["sectorBreakdown"] == {"Consumer Cyclical": pytest.approx(100.0)}


def test_unknown_symbols_raise_empty_portfolio() -> None:
    with pytest.raises(EmptyPortfolio, match="No valid stock quotes found"):
        _service().analyze({"portfolio": [{"symbol": "ZZZZ", "shares": 5}]})


def test_all_zero_shares_raise_empty_portfolio() -> None:
    with pytest.raises(EmptyPortfolio):
        _service().analyze({"portfolio": [{"symbol": "AAPL", "shares": 0}]})


def test_invalid_payload_raises_invalid_input() -> None:
    with pytest.raises(InvalidInput):
        _service().analyze({"portfolio": [{"symbol": "AAPL", "shares": -1}]})


def test_narrator_text_replaces_overall_advice() -> None:
    narrator = _StubNarrator("Trim the winners.")
    result = _service(narrator=narrator).analyze(HOLDINGS)
    assert result["overallAdvice"] == "Trim the winners."
    summary = narrator.summaries[0]
    assert summary["riskLevel"] == result["riskLevel"]
    assert [stock["symbol"] for stock in summary["stocks"]] == ["AAPL", "TSLA"]


class _FailingClient:
    def generate_summary(self, prompt):
        raise RuntimeError("model unavailable")


def test_failed_narrator_keeps_risk_template_advice() -> None:
    narrator = FallbackNarrator(LlmNarrator(_FailingClient()), timeout_seconds=1.0)
    try:
        result = _service(narrator=narrator).analyze(HOLDINGS)
    finally:
        narrator.shutdown()
    baseline = _service().analyze(HOLDINGS)
    assert result["overallAdvice"] == baseline["overallAdvice"]
    assert result["overallAdvice"].startswith("Your portfolio shows high risk with an average P/E of 46.9")


def test_narrator_is_ignored_when_ai_advice_disabled() -> None:
    baseline = _service().analyze(HOLDINGS)
    result = _service(narrator=_StubNarrator("ignored"), enable_ai_advice=False).analyze(HOLDINGS)
    assert result["overallAdvice"] == baseline["overallAdvice"]


def test_suggest_excludes_held_symbols() -> None:
    result = _service().suggest({"currentStocks": [{"symbol": "AAPL", "sector": "Technology"}], "riskLevel": "low"})
    symbols = [item["symbol"] for item in result["suggestions"]]
    assert "AAPL" not in symbols
    assert 0 < result["count"] <= 5
    assert result["dataSource"] == "demo"


def test_stock_insight_uses_template_without_narrator() -> None:
    insight = _service().stock_insight("tsla")
    assert insight["symbol"] == "TSLA"
    assert insight["dataSource"] == "demo"
    assert insight["quote"]["sector"] == "Automotive"
    assert insight["insight"]


def test_stock_insight_unknown_symbol_raises() -> None:
    with pytest.raises(ValueError):
        _service().stock_insight("ZZZZ")


def test_resolve_data_source_mixed_is_live() -> None:
    live = ServiceResult(data=object(), data_provider="fmp")
    demo = ServiceResult(data=object(), data_provider="demo")
    missing = ServiceResult(data=None)
    assert resolve_data_source([demo, missing]) == "demo"
    assert resolve_data_source([live, demo]) == "live"
    assert resolve_data_source([missing]) == "live"
