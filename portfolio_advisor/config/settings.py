"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for local/stdin and HTTP-hosted modes."""

    app_name: str = "portfolio-advisor"
    app_version: str = "1.0.0"
    transport_mode: str = "auto"
    http_transport: str = "sse"
    host: str = "0.0.0.0"
    port: int = 8000
    health_path: str = "/health"
    finnhub_api_key: str | None = None
    fmp_api_key: str | None = None
    yahoo_finance_enabled: bool = True
    claude_api_key: str | None = None
    claude_model: str = DEFAULT_CLAUDE_MODEL
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    flexprice_api_key: str | None = None
    enable_ai_advice: bool = True
    narrator_timeout_seconds: float = 4.0
    request_timeout_seconds: float = 15.0
    cache_ttl_seconds: int = 60
    provider_min_interval_seconds: float = 0.2
    default_requests_per_minute: int = 100
    request_queue_limit: int = 200
    default_sector: str = "Technology"
    demo_seed: int | None = None
    log_level: str = "INFO"
    log_json: bool = False


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_optional_int(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    return Settings(
        app_name=os.getenv("APP_NAME", "portfolio-advisor"),
        transport_mode=os.getenv("TRANSPORT_MODE", "auto").strip().lower(),
        http_transport=os.getenv("HTTP_TRANSPORT", "sse").strip().lower(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int(os.getenv("PORT"), 8000),
        health_path=os.getenv("HEALTH_PATH", "/health"),
        finnhub_api_key=os.getenv("FINNHUB_API_KEY") or None,
        fmp_api_key=os.getenv("FMP_API_KEY") or None,
        yahoo_finance_enabled=_as_bool(os.getenv("YAHOO_FINANCE_ENABLED"), True),
        claude_api_key=os.getenv("CLAUDE_API_KEY") or os.getenv("ANTHROPIC_API_KEY") or None,
        claude_model=(
            os.getenv("CLAUDE_MODEL")
            or os.getenv("ANTHROPIC_MODEL")
            or DEFAULT_CLAUDE_MODEL
        ),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        flexprice_api_key=os.getenv("FLEXPRICE_API_KEY") or None,
        enable_ai_advice=_as_bool(os.getenv("ENABLE_AI_ADVICE"), True),
        narrator_timeout_seconds=_as_float(os.getenv("NARRATOR_TIMEOUT_SECONDS"), 4.0),
        request_timeout_seconds=_as_float(os.getenv("REQUEST_TIMEOUT_SECONDS"), 15.0),
        cache_ttl_seconds=_as_int(os.getenv("CACHE_TTL_SECONDS"), 60),
        provider_min_interval_seconds=_as_float(os.getenv("PROVIDER_MIN_INTERVAL_SECONDS"), 0.2),
        default_requests_per_minute=_as_int(os.getenv("DEFAULT_REQUESTS_PER_MINUTE"), 100),
        request_queue_limit=_as_int(os.getenv("REQUEST_QUEUE_LIMIT"), 200),
        default_sector=(os.getenv("DEFAULT_SECTOR") or "Technology").strip(),
        demo_seed=_as_optional_int(os.getenv("DEMO_SEED")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        log_json=_as_bool(os.getenv("LOG_JSON"), False),
    )
