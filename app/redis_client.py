"""Redis client shared by the seat locks."""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Created on first use, closed on shutdown
_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    """Get the shared Redis client, creating it on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def redis_available(client: redis.Redis) -> bool:
    """Whether Redis answers a PING."""
    try:
        return bool(await client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False


async def close_redis() -> None:
    """Close the shared client."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
