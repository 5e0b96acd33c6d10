import pytest

from portfolio_advisor.runtime.limits import RateLimitExceeded, RequestLimiter


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_per_client_window() -> None:
    clock = _Clock()
    limiter = RequestLimiter(requests_per_minute=2, queue_limit=10, clock=clock)
    limiter.acquire("a")
    limiter.release()
    clock.now += 10
    limiter.acquire("a")
    limiter.release()
    with pytest.raises(RateLimitExceeded) as excinfo:
        limiter.acquire("a")
    assert excinfo.value.retry_after_seconds == pytest.approx(50.0)
    limiter.acquire("b")
    limiter.release()


def test_window_slides() -> None:
    clock = _Clock()
    limiter = RequestLimiter(requests_per_minute=1, clock=clock)
    limiter.acquire("a")
    limiter.release()
    clock.now += 61
    limiter.acquire("a")
    assert limiter.inflight == 1


def test_inflight_cap() -> None:
    limiter = RequestLimiter(requests_per_minute=100, queue_limit=2)
    limiter.acquire("a")
    limiter.acquire("b")
    with pytest.raises(RateLimitExceeded) as excinfo:
        limiter.acquire("c")
    assert excinfo.value.retry_after_seconds == 1.0
    assert limiter.inflight == 2
    limiter.release()
    limiter.acquire("c")
    assert limiter.inflight == 2


def test_release_never_goes_negative() -> None:
    limiter = RequestLimiter()
    limiter.release()
    assert limiter.inflight == 0
