"""Redis connection and client management."""

from typing import Optional

import redis.asyncio as redis

from app.settings import settings
from app.utils.logging_config import logger

_redis_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    """
    Returns the shared Redis client, creating it on first use.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            str(settings.REDIS_URL), encoding="utf-8", decode_responses=True
        )
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


async def check_redis_connection():
    """
    Checks the connection to the Redis server.
    Raises an exception if the connection fails.
    """
    try:
        if await get_redis().ping():
            logger.info("Redis connection successful")
        else:
            raise ConnectionError(
                "Redis connection failed: PING command returned False"
            )
    except Exception as e:
        logger.error(f"Redis connection error: {e}")
        raise
