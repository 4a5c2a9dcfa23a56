import time
from collections import deque
from collections.abc import Callable
from typing import Protocol

from fastapi import HTTPException, Request
from redis.exceptions import RedisError

from src.core.config import settings
from src.core.logging import get_logger
from src.core.services.redis_service import RedisService

logger = get_logger(__name__)

Clock = Callable[[], float]


class RateLimitBackend(Protocol):
    async def hit(self, key: str, limit: int, window: int) -> bool: ...


class InMemoryRateLimitBackend:
    """
    Sliding-window limiter for a single process.

    One instance is built per process at startup and shared through
    `app.state`; the clock is injectable so windows can be tested without sleeping.
    """

    MAX_TRACKED_KEYS = 10_000

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}

    async def hit(self, key: str, limit: int, window: int) -> bool:
        now = self._clock()
        hits = self._hits.setdefault(key, deque())

        while hits and hits[0] <= now - window:
            hits.popleft()

        if len(hits) >= limit:
            return False

        hits.append(now)
        if len(self._hits) > self.MAX_TRACKED_KEYS:
            self._prune(now, window)
        return True

    def _prune(self, now: float, window: int) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= now - window]
        for key in stale:
            del self._hits[key]


class RedisRateLimitBackend:
    """Fixed-window limiter kept in Redis so every instance shares the counters."""

    def __init__(self, redis: RedisService):
        self.redis = redis

    async def hit(self, key: str, limit: int, window: int) -> bool:
        return await self.redis.check_rate_limit(key, limit, window)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def session_or_ip(request: Request) -> str:
    session_id = request.headers.get("x-session-id")
    return f"session:{session_id}" if session_id else f"ip:{client_ip(request)}"


class RateLimiter:
    """
    Rate limiter dependency for FastAPI routes.

    Usage:
        @router.post("/reports", dependencies=[Depends(rate_limit_reports)])
        async def submit_report():
            ...

    The backend is read from `request.app.state.rate_limit_backend`.
    """

    def __init__(self, times: int, seconds: int, scope: str, key_func: Callable[[Request], str] = client_ip):
        self.times: int = times
        self.seconds: int = seconds
        self.scope: str = scope
        self.key_func = key_func

    async def __call__(self, request: Request):
        backend: RateLimitBackend = request.app.state.rate_limit_backend
        key = f"rate_limit:{self.scope}:{self.key_func(request)}"

        try:
            allowed: bool = await backend.hit(key, self.times, self.seconds)
        except RedisError as e:
            logger.warning(f"Rate limit backend unavailable, allowing request: {e}")
            return

        if not allowed:
            raise HTTPException(
                status_code=429,
                detail=f"Too many requests. Please wait {self.seconds} seconds.",
                headers={"Retry-After": str(self.seconds)},
            )


rate_limit_moderation = RateLimiter(
    times=settings.MODERATION_RATE_LIMIT_PER_MINUTE, seconds=60, scope="moderation"
)

rate_limit_reports = RateLimiter(
    times=settings.REPORT_RATE_LIMIT_PER_MINUTE, seconds=60, scope="report", key_func=session_or_ip
)
