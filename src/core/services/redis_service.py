from redis.asyncio import Redis

from src.core.config import settings


class RedisService:
    def __init__(self, url: str | None = None):
        self.client = Redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)

    async def ping(self) -> bool:
        return await self.client.ping()

    async def close(self):
        """Close Redis connection."""
        await self.client.aclose()

    async def check_rate_limit(self, key: str, limit: int, window: int) -> bool:
        """
        Fixed-window counter shared by every process talking to this Redis.

        Args:
            key: Redis key (e.g., rate_limit:report:<session>)
            limit: Maximum number of allowed requests (e.g., 10)
            window: Duration window in seconds (e.g., 60)

        Returns:
            bool: True if the limit has not been exceeded, False if it has been exceeded
        """
        current_count = await self.client.incr(key)

        if current_count == 1:
            await self.client.expire(key, window)

        return current_count <= limit
