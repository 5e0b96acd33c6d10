"""JSON HTTP routes served next to the MCP transport."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from portfolio_advisor.portfolio.models import EmptyPortfolio, InvalidInput
from portfolio_advisor.portfolio.suggestions import FALLBACK_SUGGESTIONS
from portfolio_advisor.runtime.limits import RateLimitExceeded, RequestLimiter
from portfolio_advisor.runtime.monitoring import ServerMetrics, log_request_event
from portfolio_advisor.services.usage_service import UNKNOWN_EVENT

if TYPE_CHECKING:
    from portfolio_advisor.tools.registry import ToolServices

LOGGER = logging.getLogger(__name__)
ANALYZE_FAILURE_MESSAGE = "Failed to analyze portfolio"
SLOW_RESPONSE_MS = 2000.0

Handler = Callable[[Request], Awaitable[Response]]


def client_id_for(request: Request) -> str:
    header = request.headers.get("x-api-key") or request.headers.get("x-client-id")
    if header:
        return header
    return request.client.host if request.client else "anonymous"


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def _mover_row(mover: Any) -> dict[str, Any]:
    return {
        "symbol": mover.symbol,
        "name": mover.name,
        "price": mover.price,
        "change": mover.change,
        "changesPercentage": mover.percent_change,
        "volume": mover.volume,
    }


class HttpRoutes:
    """Route handlers bound to the service bundle, the limiter and metrics."""

    def __init__(
        self,
        services: ToolServices,
        request_limiter: RequestLimiter | None = None,
        server_metrics: ServerMetrics | None = None,
        service_name: str = "portfolio-advisor",
        mode: str = "http",
    ) -> None:
        self.services = services
        self.request_limiter = request_limiter
        self.server_metrics = server_metrics or ServerMetrics()
        self.service_name = service_name
        self.mode = mode

    def guarded(self, route: str, handler: Handler) -> Handler:
        async def endpoint(request: Request) -> Response:
            started = time.perf_counter()
            client_id = client_id_for(request)
            if self.request_limiter is not None:
                try:
                    self.request_limiter.acquire(client_id)
                except RateLimitExceeded as error:
                    self.server_metrics.record_rate_limit_hit(client_id)
                    return JSONResponse(
                        {"error": "Rate limit exceeded."},
                        status_code=429,
                        headers={"Retry-After": str(max(1, int(error.retry_after_seconds)))},
                    )
            status = 500
            try:
                response = await handler(request)
                status = response.status_code
                return response
            finally:
                if self.request_limiter is not None:
                    self.request_limiter.release()
                latency_ms = (time.perf_counter() - started) * 1000.0
                success = status < 500
                self.server_metrics.record(latency_ms=latency_ms, success=success, route=route)
                log_request_event(
                    route=route,
                    latency_ms=latency_ms,
                    success=success,
                    client_id=client_id,
                    status=status,
                    warning="slow_response" if latency_ms > SLOW_RESPONSE_MS else None,
                )

        return endpoint

    async def analyze_portfolio(self, request: Request) -> Response:
        payload = await _read_json(request)
        try:
            analysis = await asyncio.to_thread(self.services.portfolio.analyze, payload)
        except InvalidInput as error:
            return JSONResponse(
                {"error": str(error), "issues": [issue.to_dict() for issue in error.issues]},
                status_code=400,
            )
        except EmptyPortfolio as error:
            return JSONResponse({"error": str(error)}, status_code=400)
        except Exception:
            LOGGER.exception("portfolio analysis failed")
            return JSONResponse({"error": ANALYZE_FAILURE_MESSAGE}, status_code=500)
        return JSONResponse(analysis)

    async def suggested_stocks(self, request: Request) -> Response:
        payload = await _read_json(request)
        try:
            result = await asyncio.to_thread(self.services.portfolio.suggest, payload)
        except Exception:
            LOGGER.exception("stock suggestions failed; returning static suggestions")
            result = FALLBACK_SUGGESTIONS.to_dict()
        return JSONResponse(result)

    def movers(self, kind: str) -> Handler:
        async def handler(_: Request) -> Response:
            result = await asyncio.to_thread(self.services.market.get_movers, kind)
            rows = [_mover_row(mover) for mover in result.data or []]
            payload: dict[str, Any] = {
                kind: rows,
                "count": len(rows),
                "dataSource": "live" if result.data is not None and not result.is_demo else "demo",
            }
            if result.warning:
                payload["warning"] = result.warning
            if result.error:
                payload["warning"] = result.error.message
            return JSONResponse(payload)

        return handler

    async def search_stocks(self, request: Request) -> Response:
        query = (request.query_params.get("q") or "").strip()
        if not query:
            return JSONResponse({"error": "Query parameter 'q' is required"}, status_code=400)
        result = await asyncio.to_thread(self.services.quotes.search, query)
        rows = [
            {"symbol": item.symbol, "name": item.name, "exchange": item.exchange}
            for item in result.data or []
        ]
        return JSONResponse(
            {
                "results": rows,
                "count": len(rows),
                "dataSource": "live" if result.data is not None and not result.is_demo else "demo",
            }
        )

    async def track_usage(self, request: Request) -> Response:
        payload = await _read_json(request)
        if not isinstance(payload, dict):
            payload = {}
        event = payload.get("event")
        if not isinstance(event, str) or not event.strip():
            event = UNKNOWN_EVENT
        metadata = payload.get("metadata")
        result = await asyncio.to_thread(
            self.services.usage.track,
            event.strip(),
            metadata if isinstance(metadata, dict) else None,
        )
        return JSONResponse({"success": result["success"], "usage": result["usage"]})

    async def health(self, _: Request) -> Response:
        ctx = self.services.quotes.ctx
        return JSONResponse(
            {
                "status": "ok",
                "service": self.service_name,
                "mode": self.mode,
                "providers": ctx.configured_providers(),
                "disabled_providers": self.services.quotes.provider_status.snapshot(),
                "metrics": self.server_metrics.snapshot().to_dict(),
            }
        )


def build_routes(
    services: ToolServices,
    request_limiter: RequestLimiter | None = None,
    server_metrics: ServerMetrics | None = None,
    service_name: str = "portfolio-advisor",
    mode: str = "http",
    health_path: str = "/health",
) -> list[Route]:
    routes = HttpRoutes(services, request_limiter, server_metrics, service_name, mode)
    table: list[tuple[str, list[str], Handler]] = [
        ("/portfolio/analyze", ["POST"], routes.analyze_portfolio),
        ("/stocks/suggested", ["POST"], routes.suggested_stocks),
        ("/stocks/gainers", ["GET"], routes.movers("gainers")),
        ("/stocks/losers", ["GET"], routes.movers("losers")),
        ("/stocks/actives", ["GET"], routes.movers("actives")),
        ("/stocks/search", ["GET"], routes.search_stocks),
        ("/usage/track", ["POST"], routes.track_usage),
    ]
    built = [Route(path, endpoint=routes.guarded(path, handler), methods=methods) for path, methods, handler in table]
    built.append(Route(health_path, endpoint=routes.health, methods=["GET"]))
    return built


def register_http_routes(mcp: FastMCP, routes: list[Route]) -> None:
    for route in routes:
        methods = sorted((route.methods or {"GET"}) - {"HEAD"})
        mcp.custom_route(route.path, methods=methods)(route.endpoint)

