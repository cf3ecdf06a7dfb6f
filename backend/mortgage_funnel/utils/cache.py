"""Shared Redis client.

Used by the redis submission-counter backend and the readiness probe.
The client is created lazily so a memory-backed deployment never connects.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from mortgage_funnel.config import settings

logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        logger.info("Connecting to Redis for the submission counter")
        _client = redis.from_url(settings.redis_url, decode_responses=True, max_connections=20)
    return _client


async def ping_redis() -> bool:
    client = await get_redis()
    return bool(await client.ping())


async def close_redis() -> None:
    """Release the pool on shutdown; safe to call when never connected."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
