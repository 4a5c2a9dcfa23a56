"""Tests for the per-scope rate limiter."""

from types import SimpleNamespace

import pytest
from fastapi import HTTPException, Request
from redis.exceptions import ConnectionError as RedisConnectionError

from src.core.middlewares.ratelimit import InMemoryRateLimitBackend, RateLimiter, session_or_ip


class _FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class _BrokenBackend:
    async def hit(self, key: str, limit: int, window: int) -> bool:
        raise RedisConnectionError("redis is down")


def _request(backend, headers: dict[str, str] | None = None, host: str = "10.0.0.1") -> Request:
    scope = {
        "type": "http",
        "app": SimpleNamespace(state=SimpleNamespace(rate_limit_backend=backend)),
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (host, 50000),
    }
    return Request(scope)


async def test_sliding_window_allows_up_to_limit():
    clock = _FakeClock()
    backend = InMemoryRateLimitBackend(clock=clock)

    assert [await backend.hit("k", 3, 60) for _ in range(4)] == [True, True, True, False]

    clock.now += 59
    assert await backend.hit("k", 3, 60) is False
    clock.now += 1
    assert await backend.hit("k", 3, 60) is True


async def test_keys_are_independent():
    backend = InMemoryRateLimitBackend(clock=_FakeClock())
    assert await backend.hit("a", 1, 60) is True
    assert await backend.hit("a", 1, 60) is False
    assert await backend.hit("b", 1, 60) is True


async def test_stale_keys_are_pruned(monkeypatch):
    clock = _FakeClock()
    backend = InMemoryRateLimitBackend(clock=clock)
    monkeypatch.setattr(InMemoryRateLimitBackend, "MAX_TRACKED_KEYS", 2)

    await backend.hit("old-1", 5, 60)
    await backend.hit("old-2", 5, 60)
    clock.now += 120
    await backend.hit("fresh", 5, 60)

    assert set(backend._hits) == {"fresh"}


async def test_limiter_raises_429_with_retry_after():
    limiter = RateLimiter(times=2, seconds=60, scope="test")
    request = _request(InMemoryRateLimitBackend(clock=_FakeClock()))

    await limiter(request)
    await limiter(request)
    with pytest.raises(HTTPException) as exc_info:
        await limiter(request)

    assert exc_info.value.status_code == 429
    assert exc_info.value.headers == {"Retry-After": "60"}


async def test_limiter_keys_by_client_ip():
    limiter = RateLimiter(times=1, seconds=60, scope="test")
    backend = InMemoryRateLimitBackend(clock=_FakeClock())

    await limiter(_request(backend, host="10.0.0.1"))
    await limiter(_request(backend, host="10.0.0.2"))
    with pytest.raises(HTTPException):
        await limiter(_request(backend, host="10.0.0.1"))


async def test_backend_outage_lets_requests_through():
    limiter = RateLimiter(times=1, seconds=60, scope="test")
    request = _request(_BrokenBackend())
    for _ in range(3):
        await limiter(request)


def test_session_header_takes_precedence_over_ip():
    assert session_or_ip(_request(None, headers={"X-Session-ID": "abc"})) == "session:abc"
    assert session_or_ip(_request(None, host="192.168.0.9")) == "ip:192.168.0.9"
