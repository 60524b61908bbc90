"""Redis async connection pool shared by the booking lock."""

import redis.asyncio as aioredis

from ridealong.config import settings

_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url, decode_responses=True
)


async def get_redis() -> aioredis.Redis:
    """FastAPI dependency: a Redis client backed by the shared pool."""
    return aioredis.Redis(connection_pool=_pool)


async def close_pool() -> None:
    await _pool.disconnect()
