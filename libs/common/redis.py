"""Shared async Redis connection."""

from typing import Optional

from redis.asyncio import Redis

from libs.common.config import get_settings

_redis: Optional[Redis] = None


async def get_redis() -> Redis:
    """Return the process-wide Redis client, creating it on first use."""
    global _redis
    if _redis is None:
        settings = get_settings()
        _redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
