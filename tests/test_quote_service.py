import threading

from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.providers.finnhub import FinnhubClient
from portfolio_advisor.providers.fmp import FmpClient
from portfolio_advisor.providers.http import ProviderError
from portfolio_advisor.providers.models import NormalizedQuote, NormalizedSearchResult
from portfolio_advisor.services.base import ServiceContext
from portfolio_advisor.services.quote_service import QuoteService
from portfolio_advisor.utils.rate_limit import RateLimiterRegistry


def _ctx(**providers) -> ServiceContext:
    return ServiceContext(providers=dict(providers), cache=TTLCache(), rate_limiter=RateLimiterRegistry(0.0))


def _quote(symbol: str, source: str) -> NormalizedQuote:
    return NormalizedQuote(symbol=symbol, price=10.0, change=0.1, percent_change=1.0, previous_close=9.9, source=source)


def test_get_quote_prefers_fmp(monkeypatch) -> None:
    fmp = FmpClient("k")
    finnhub = FinnhubClient("k")
    monkeypatch.setattr(fmp, "get_quote", lambda symbol: _quote(symbol, "fmp"))
    monkeypatch.setattr(finnhub, "get_quote", lambda symbol: (_ for _ in ()).throw(AssertionError("not reached")))
    result = QuoteService(_ctx(fmp=fmp, finnhub=finnhub)).get_quote("AAPL")
    assert result.source == "FMP"
    assert result.is_demo is False


def test_get_quote_falls_back_to_finnhub_then_demo(monkeypatch) -> None:
    fmp = FmpClient("k")
    finnhub = FinnhubClient("k")
    monkeypatch.setattr(fmp, "get_quote", lambda symbol: (_ for _ in ()).throw(ProviderError("fmp", "NETWORK", "down")))
    monkeypatch.setattr(finnhub, "get_quote", lambda symbol: None)
    result = QuoteService(_ctx(fmp=fmp, finnhub=finnhub, demo=DemoMarketData())).get_quote("AAPL")
    assert result.is_demo is True
    assert result.data.price == 185.92


def test_get_quote_unknown_symbol_returns_error_envelope() -> None:
    result = QuoteService(_ctx(demo=DemoMarketData())).get_quote("ZZZZ")
    assert result.data is None
    assert result.error is not None
    assert result.error.code == "UPSTREAM"


def test_get_quotes_fans_out_concurrently_and_dedupes(monkeypatch) -> None:
    fmp = FmpClient("k")
    seen: list[str] = []
    threads: set[str] = set()
    lock = threading.Lock()

    def get_quote(symbol):
        with lock:
            seen.append(symbol)
            threads.add(threading.current_thread().name)
        return None if symbol == "ZZZZ" else _quote(symbol, "fmp")

    monkeypatch.setattr(fmp, "get_quote", get_quote)
    results = QuoteService(_ctx(fmp=fmp), max_workers=4).get_quotes(["AAPL", "MSFT", "AAPL", "ZZZZ"])
    assert list(results) == ["AAPL", "MSFT", "ZZZZ"]
    assert sorted(seen) == ["AAPL", "MSFT", "ZZZZ"]
    assert results["AAPL"].data.symbol == "AAPL"
    assert results["ZZZZ"].data is None
    assert all(name.startswith("quote") for name in threads)


def test_get_quotes_empty_input() -> None:
    assert QuoteService(_ctx()).get_quotes([]) == {}


def test_search_is_cached(monkeypatch) -> None:
    finnhub = FinnhubClient("k")
    calls = {"count": 0}

    def search(query, limit):
        calls["count"] += 1
        return [NormalizedSearchResult(symbol="AAPL", name="Apple Inc", exchange="Common Stock")]

    monkeypatch.setattr(finnhub, "search_symbols", search)
    service = QuoteService(_ctx(finnhub=finnhub))
    first = service.search("apple")
    second = service.search(" Apple ")
    assert first.data[0].symbol == "AAPL"
    assert second.data[0].symbol == "AAPL"
    assert calls["count"] == 1


def test_search_falls_back_to_demo_catalog() -> None:
    result = QuoteService(_ctx(demo=DemoMarketData())).search("micro")
    assert result.is_demo is True
    assert [item.symbol for item in result.data] == ["MSFT"]
