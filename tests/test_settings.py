from portfolio_advisor.config.settings import get_settings
from portfolio_advisor.main import build_narrator, build_service_context
from portfolio_advisor.portfolio.narrator import FallbackNarrator
from portfolio_advisor.runtime.limits import RequestLimiter
from portfolio_advisor.runtime.monitoring import ServerMetrics

ENV_KEYS = (
    "FMP_API_KEY",
    "FINNHUB_API_KEY",
    "CLAUDE_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "FLEXPRICE_API_KEY",
    "ENABLE_AI_ADVICE",
    "YAHOO_FINANCE_ENABLED",
    "DEMO_SEED",
    "DEFAULT_SECTOR",
    "PORT",
    "LOG_LEVEL",
)


def _clear(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch) -> None:
    _clear(monkeypatch)
    settings = get_settings()
    assert settings.port == 8000
    assert settings.enable_ai_advice is True
    assert settings.default_sector == "Technology"
    assert settings.demo_seed is None
    assert settings.fmp_api_key is None
    assert build_narrator(settings) is None


def test_env_overrides_and_bad_numbers(monkeypatch) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("PORT", "not-a-port")
    monkeypatch.setenv("DEMO_SEED", "42")
    monkeypatch.setenv("ENABLE_AI_ADVICE", "off")
    monkeypatch.setenv("DEFAULT_SECTOR", " Unclassified ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.port == 8000
    assert settings.demo_seed == 42
    assert settings.enable_ai_advice is False
    assert settings.default_sector == "Unclassified"
    assert settings.log_level == "DEBUG"


def test_narrator_built_from_llm_key(monkeypatch) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    narrator = build_narrator(get_settings())
    assert isinstance(narrator, FallbackNarrator)
    narrator.shutdown()

    monkeypatch.setenv("ENABLE_AI_ADVICE", "false")
    assert build_narrator(get_settings()) is None


def test_service_context_only_wires_configured_providers(monkeypatch) -> None:
    _clear(monkeypatch)
    monkeypatch.setenv("YAHOO_FINANCE_ENABLED", "false")
    monkeypatch.setenv("FMP_API_KEY", "f-key")
    ctx = build_service_context(get_settings(), ServerMetrics(), RequestLimiter())
    assert ctx.configured_providers() == ["demo", "fmp"]
    assert ctx.get_provider("demo").get_quote("XOM") is not None
