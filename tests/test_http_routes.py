import pytest
from starlette.applications import Starlette
from starlette.testclient import TestClient

from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.http_routes import build_routes
from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.runtime.limits import RequestLimiter
from portfolio_advisor.runtime.monitoring import ServerMetrics
from portfolio_advisor.services.base import ServiceContext
from portfolio_advisor.tools.registry import build_tool_services
from portfolio_advisor.utils.rate_limit import RateLimiterRegistry


def _services():
    ctx = ServiceContext(
        providers={"demo": DemoMarketData(seed=1)},
        cache=TTLCache(),
        rate_limiter=RateLimiterRegistry(0.0),
    )
    return build_tool_services(ctx, suggestion_seed=1)


def _client(services=None, limiter=None, metrics=None) -> TestClient:
    routes = build_routes(
        services or _services(),
        request_limiter=limiter,
        server_metrics=metrics,
        service_name="portfolio-advisor-test",
        mode="http",
    )
    return TestClient(Starlette(routes=routes))


def test_analyze_portfolio_success() -> None:
    response = _client().post(
        "/portfolio/analyze",
        json={"portfolio": [{"symbol": "AAPL", "shares": 50}, {"symbol": "TSLA", "shares": 25}]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["dataSource"] == "demo"
    assert {item["symbol"] for item in body["individualAdvice"]} == {"AAPL", "TSLA"}
    assert body["riskLevel"] in {"LOW", "MEDIUM", "HIGH"}


def test_analyze_portfolio_rejects_bad_payload() -> None:
    client = _client()
    response = client.post("/portfolio/analyze", json={"portfolio": "AAPL"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid portfolio data"
    assert response.json()["issues"][0]["code"] == "invalid_payload"

    malformed = client.post("/portfolio/analyze", content=b"{not json", headers={"content-type": "application/json"})
    assert malformed.status_code == 400


def test_analyze_portfolio_oversized_shares_is_400() -> None:
    response = _client().post(
        "/portfolio/analyze",
        content=b'{"portfolio": [{"symbol": "AAPL", "shares": 1' + b"0" * 400 + b"}]}",
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["issues"][0]["code"] == "invalid_shares"


def test_analyze_portfolio_unknown_symbols_is_400() -> None:
    response = _client().post("/portfolio/analyze", json={"portfolio": [{"symbol": "ZZZZ", "shares": 1}]})
    assert response.status_code == 400
    assert response.json() == {"error": "No valid stock quotes found"}


def test_analyze_portfolio_unexpected_failure_is_500(monkeypatch) -> None:
    services = _services()

    def boom(payload):
        raise RuntimeError("database password leaked")

    monkeypatch.setattr(services.portfolio, "analyze", boom)
    response = _client(services).post("/portfolio/analyze", json={"portfolio": []})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze portfolio"}


def test_suggested_stocks() -> None:
    response = _client().post(
        "/stocks/suggested",
        json={"currentStocks": [{"symbol": "AAPL", "sector": "Technology"}], "riskLevel": "MEDIUM", "diversificationScore": 20},
    )
    assert response.status_code == 200
    body = response.json()
    assert "AAPL" not in [item["symbol"] for item in body["suggestions"]]
    assert body["count"] == len(body["suggestions"])
    assert body["reasoning"]


def test_suggested_stocks_failure_returns_static_list(monkeypatch) -> None:
    services = _services()

    def boom(payload):
        raise RuntimeError("down")

    monkeypatch.setattr(services.portfolio, "suggest", boom)
    body = _client(services).post("/stocks/suggested", json={}).json()
    assert [item["symbol"] for item in body["suggestions"]] == ["JPM", "JNJ", "XOM"]


@pytest.mark.parametrize("kind", ["gainers", "losers", "actives"])
def test_movers(kind) -> None:
    response = _client().get(f"/stocks/{kind}")
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == len(body[kind]) > 0
    assert body["dataSource"] == "demo"
    assert set(body[kind][0]) == {"symbol", "name", "price", "change", "changesPercentage", "volume"}


def test_search_requires_query() -> None:
    client = _client()
    assert client.get("/stocks/search").status_code == 400
    assert client.get("/stocks/search", params={"q": "  "}).json() == {"error": "Query parameter 'q' is required"}


def test_search_returns_matches() -> None:
    body = _client().get("/stocks/search", params={"q": "tesla"}).json()
    assert body["results"] == [{"symbol": "TSLA", "name": "Tesla, Inc.", "exchange": "NASDAQ"}]
    assert body["count"] == 1


def test_track_usage() -> None:
    client = _client()
    for payload in ({}, {"event": "  "}, None):
        response = client.post("/usage/track", json=payload)
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["usage"]["portfoliosAnalyzed"] == 0
    body = client.post("/usage/track", json={"event": "portfolio_analysis", "metadata": {"n": 1}}).json()
    assert body["success"] is True
    assert body["usage"]["portfoliosAnalyzed"] == 1


def test_rate_limited_requests_get_429_and_are_counted() -> None:
    metrics = ServerMetrics()
    limiter = RequestLimiter(requests_per_minute=1, queue_limit=10)
    client = _client(limiter=limiter, metrics=metrics)
    assert client.get("/stocks/gainers").status_code == 200
    limited = client.get("/stocks/losers")
    assert limited.status_code == 429
    assert int(limited.headers["Retry-After"]) >= 1
    assert limiter.inflight == 0

    health = client.get("/health").json()
    assert health["metrics"]["rate_limit_hits"] == 1
    assert health["metrics"]["total_requests"] == 1


def test_health_reports_service_state() -> None:
    client = _client()
    client.get("/stocks/gainers")
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["service"] == "portfolio-advisor-test"
    assert body["mode"] == "http"
    assert body["providers"] == ["demo"]
    assert body["disabled_providers"] == {}
    assert body["metrics"]["error_rate"] == 0.0
    assert body["metrics"]["requests_by_route"] == {"/stocks/gainers": 1}
