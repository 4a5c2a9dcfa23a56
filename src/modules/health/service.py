import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config import settings
from src.core.database import AsyncSessionLocal
from src.core.logging import get_logger
from src.core.services.redis_service import RedisService
from src.modules.health.schemas import HealthCheckResponse, ServiceStatus

logger = get_logger(__name__)


class HealthCheckService:
    """Checks the stores the moderation service depends on.

    Redis is only probed when it backs rate limiting; the moderation log and
    reports always need the database.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal):
        self.session_factory = session_factory

    @property
    def uses_redis(self) -> bool:
        return settings.RATE_LIMIT_BACKEND == "redis"

    @staticmethod
    async def _probe(name: str, check: Callable[[], Awaitable[object]]) -> ServiceStatus:
        start = time.perf_counter()
        try:
            await check()
            status, message = "healthy", f"{name.capitalize()} connection successful"
        except Exception as e:
            logger.error(f"{name.capitalize()} health check failed: {e}")
            status, message = "unhealthy", f"{name.capitalize()} connection failed: {e!s}"

        return ServiceStatus(
            name=name,
            status=status,
            message=message,
            response_time_ms=round((time.perf_counter() - start) * 1000, 2),
        )

    async def check_database(self) -> ServiceStatus:
        async def select_one():
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))

        return await self._probe("database", select_one)

    async def check_redis(self) -> ServiceStatus:
        redis = RedisService()
        try:
            return await self._probe("redis", redis.ping)
        finally:
            await redis.close()

    async def check_all(self) -> dict[str, ServiceStatus]:
        services = {"database": await self.check_database()}
        if self.uses_redis:
            services["redis"] = await self.check_redis()
        return services

    async def is_ready(self) -> bool:
        return all(s.status == "healthy" for s in (await self.check_all()).values())

    async def get_health_status(self) -> HealthCheckResponse:
        services = await self.check_all()

        unhealthy_count = sum(1 for s in services.values() if s.status == "unhealthy")
        if unhealthy_count == 0:
            overall_status = "healthy"
        elif unhealthy_count == len(services):
            overall_status = "unhealthy"
        else:
            overall_status = "degraded"

        return HealthCheckResponse(
            status=overall_status,
            version="1.0.0",
            environment=settings.ENVIRONMENT,
            services=services,
            timestamp=datetime.now(tz=UTC).isoformat(),
        )
