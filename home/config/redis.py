"""Redis client for change notifications."""

from typing import Optional

import redis.asyncio as redis

from home.settings import settings
from home.utils.logging_config import logger


async def create_redis_client() -> Optional[redis.Redis]:
    """
    Connect to REDIS_URL if one is configured.

    Returns None when Redis is not configured or unreachable; notifications
    are optional, so startup carries on without them.
    """
    if settings.REDIS_URL is None:
        logger.info("REDIS_URL not set; change notifications disabled")
        return None

    client = redis.from_url(
        str(settings.REDIS_URL), encoding="utf-8", decode_responses=True
    )
    try:
        if not await client.ping():
            raise ConnectionError("Redis connection failed: PING command returned False")
        logger.info("Redis connection successful")
        return client
    except Exception as e:
        logger.warning(f"Redis connection error, notifications disabled: {e}")
        await client.aclose()
        return None
