from portfolio_advisor.cache.ttl_cache import TTLCache
from portfolio_advisor.services.provider_status import ProviderStatus


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_cool_down_expires() -> None:
    clock = _Clock()
    status = ProviderStatus(clock=clock)
    until = status.disable_provider("fmp", 60)
    assert until == 1060.0
    assert status.snapshot() == {"fmp": {"disabled_until": 1060.0, "reason": "rate_limit"}}
    clock.now = 1060.0
    assert status.is_disabled("fmp") is False
    assert status.snapshot() == {}


def test_shorter_window_does_not_replace_longer_one() -> None:
    status = ProviderStatus(clock=_Clock())
    status.disable_provider("finnhub", 3600, reason="auth")
    assert status.disable_provider("finnhub", 60) == 4600.0
    assert status.snapshot()["finnhub"]["reason"] == "auth"


def test_enable_provider_clears_window() -> None:
    status = ProviderStatus(clock=_Clock())
    status.disable_provider("fmp", 60)
    status.enable_provider("fmp")
    assert status.get_disabled_until("fmp") is None


def test_ttl_cache_entries_expire() -> None:
    clock = _Clock()
    cache = TTLCache(default_ttl_seconds=30, clock=clock)
    cache.set("market:movers:gainers", ["NVDA"])
    cache.set("quote:search:apple:10", ["AAPL"], ttl_seconds=300)
    clock.now += 29
    assert cache.get("market:movers:gainers") == ["NVDA"]
    clock.now += 1
    assert cache.get("market:movers:gainers") is None
    assert cache.get("quote:search:apple:10") == ["AAPL"]
    assert cache.get("missing") is None
