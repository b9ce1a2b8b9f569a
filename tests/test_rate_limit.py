import pytest

from app.core.rate_limit import SlidingWindowRateLimiter
from app.main import app


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_max_then_reports_wait():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=3, window_seconds=10, clock=clock)

    assert [limiter.hit("1.2.3.4") for _ in range(3)] == [0.0, 0.0, 0.0]
    clock.now += 4
    assert limiter.hit("1.2.3.4") == pytest.approx(6.0)


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=10, clock=clock)
    limiter.hit("a")
    clock.now += 5
    limiter.hit("a")

    clock.now += 5
    assert limiter.hit("a") == 0.0
    assert limiter.hit("a") > 0


def test_keys_are_counted_separately():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=10, clock=FakeClock())

    assert limiter.hit("a") == 0.0
    assert limiter.hit("b") == 0.0
    assert limiter.hit("a") > 0


def test_zero_max_disables_limiting():
    limiter = SlidingWindowRateLimiter(max_requests=0, window_seconds=10, clock=FakeClock())

    assert all(limiter.hit("a") == 0.0 for _ in range(500))


def test_request_over_the_limit_gets_429(client, monkeypatch):
    monkeypatch.setattr(
        app.state,
        "rate_limiter",
        SlidingWindowRateLimiter(max_requests=60, window_seconds=10, clock=FakeClock()),
    )

    statuses = [client.get("/health").status_code for _ in range(60)]
    blocked = client.get("/health")

    assert statuses == [200] * 60
    assert blocked.status_code == 429
    assert blocked.json() == {
        "error": "rate limit exceeded",
        "details": "Maximum 60 requests per 10 seconds",
    }
    assert blocked.headers["retry-after"] == "10"


def test_limit_applies_to_api_routes(client, upstream, monkeypatch):
    monkeypatch.setattr(
        app.state,
        "rate_limiter",
        SlidingWindowRateLimiter(max_requests=1, window_seconds=10, clock=FakeClock()),
    )

    client.post("/api/chat", json={"message": "2+2?"})
    response = client.post("/api/chat", json={"message": "2+2?"})

    assert response.status_code == 429
    assert upstream.calls == 1
