"""Application entrypoint for the portfolio advisor service."""

from __future__ import annotations

import asyncio
import logging
import os

from mcp.server.fastmcp import FastMCP

from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.config.settings import Settings, get_settings
from portfolio_advisor.http_routes import build_routes, register_http_routes
from portfolio_advisor.portfolio.narrator import FallbackNarrator, LlmNarrator, Narrator, TemplateNarrator
from portfolio_advisor.portfolio.sectors import DEFAULT_SECTOR_MAP
from portfolio_advisor.portfolio.suggestions import SECTOR_CATALOG
from portfolio_advisor.prompts.portfolio_prompts import register_portfolio_prompts
from portfolio_advisor.providers.anthropic_client import AnthropicClient
from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.providers.finnhub import FinnhubClient
from portfolio_advisor.providers.flexprice import FlexpriceClient
from portfolio_advisor.providers.fmp import FmpClient
from portfolio_advisor.providers.gemini_client import GeminiClient
from portfolio_advisor.providers.yahoo_finance import YahooFinanceClient
from portfolio_advisor.runtime.limits import RequestLimiter
from portfolio_advisor.runtime.logging_config import configure_logging
from portfolio_advisor.runtime.monitoring import ServerMetrics
from portfolio_advisor.services.base import ServiceContext
from portfolio_advisor.tools.registry import build_tool_services, register_all_tools
from portfolio_advisor.utils.rate_limit import RateLimiterRegistry

LOGGER = logging.getLogger(__name__)


def resolve_transport_mode(configured_mode: str) -> str:
    if os.getenv("RENDER") and configured_mode == "stdio":
        return "http"
    if configured_mode in {"stdio", "http"}:
        return configured_mode
    if os.getenv("RENDER") or os.getenv("PORT"):
        return "http"
    return "stdio"


def resolve_http_transport(configured_transport: str) -> str:
    if configured_transport in {"sse", "streamable"}:
        return configured_transport
    return "sse"


def build_narrator(settings: Settings) -> Narrator | None:
    """Anthropic first, then Gemini; None when neither is configured or advice is disabled."""
    if not settings.enable_ai_advice:
        return None
    if settings.claude_api_key:
        client = AnthropicClient(settings.claude_api_key, settings.claude_model, settings.request_timeout_seconds)
    elif settings.gemini_api_key:
        client = GeminiClient(settings.gemini_api_key, settings.gemini_model, settings.request_timeout_seconds)
    else:
        return None
    return FallbackNarrator(
        primary=LlmNarrator(client),
        fallback=TemplateNarrator(),
        timeout_seconds=settings.narrator_timeout_seconds,
    )


def build_service_context(settings: Settings, server_metrics: ServerMetrics, request_limiter: RequestLimiter) -> ServiceContext:
    timeout = settings.request_timeout_seconds
    known_symbols = set(DEFAULT_SECTOR_MAP)
    for entries in SECTOR_CATALOG.values():
        known_symbols.update(symbol for symbol, _ in entries)
    return ServiceContext(
        providers={
            "fmp": FmpClient(settings.fmp_api_key, timeout) if settings.fmp_api_key else None,
            "finnhub": FinnhubClient(settings.finnhub_api_key, timeout) if settings.finnhub_api_key else None,
            "yahoo": YahooFinanceClient(timeout) if settings.yahoo_finance_enabled else None,
            "demo": DemoMarketData(seed=settings.demo_seed, known_symbols=known_symbols),
            "flexprice": FlexpriceClient(settings.flexprice_api_key, timeout) if settings.flexprice_api_key else None,
        },
        cache=TTLCache(default_ttl_seconds=settings.cache_ttl_seconds),
        rate_limiter=RateLimiterRegistry(min_interval_seconds=settings.provider_min_interval_seconds),
        cache_ttl_seconds=settings.cache_ttl_seconds,
        request_limiter=request_limiter,
        server_metrics=server_metrics,
    )


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    server_metrics = ServerMetrics()
    request_limiter = RequestLimiter(
        requests_per_minute=settings.default_requests_per_minute,
        queue_limit=settings.request_queue_limit,
    )
    service_ctx = build_service_context(settings, server_metrics, request_limiter)
    services = build_tool_services(
        service_ctx,
        narrator=build_narrator(settings),
        enable_ai_advice=settings.enable_ai_advice,
        default_sector=settings.default_sector,
        suggestion_seed=settings.demo_seed,
    )
    mcp = FastMCP(name=settings.app_name, host=settings.host, port=settings.port)
    register_all_tools(mcp, services)
    register_portfolio_prompts(mcp)

    resolved_mode = resolve_transport_mode(settings.transport_mode)
    resolved_http_transport = resolve_http_transport(settings.http_transport)
    register_http_routes(
        mcp,
        build_routes(
            services,
            request_limiter=request_limiter,
            server_metrics=server_metrics,
            service_name=settings.app_name,
            mode=resolved_mode,
            health_path=settings.health_path,
        ),
    )

    live = [name for name in ("fmp", "finnhub", "yahoo") if service_ctx.get_provider(name)]
    if not live:
        LOGGER.warning("no live quote providers configured; set FMP_API_KEY or FINNHUB_API_KEY. Serving demo data.")
    LOGGER.info("starting %s: mode=%s transport=%s providers=%s", settings.app_name, resolved_mode, resolved_http_transport, live)

    if resolved_mode == "stdio":
        await mcp.run_stdio_async()
    elif resolved_http_transport == "streamable":
        await mcp.run_streamable_http_async()
    else:
        await mcp.run_sse_async()


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
