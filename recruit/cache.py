"""Redis client and JSON cache helpers.

The client is created lazily from ``REDIS_URL``. When Redis is not configured
``get_redis`` returns ``None``; callers treat that as "no cache, no limits".
"""
from __future__ import annotations

import json
import logging
from typing import Any

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from .config import settings

logger = logging.getLogger(__name__)

CACHE_EXPIRATION_SECONDS = 3600

_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis | None:
    """Return the shared async Redis client, or None when not configured.

    Usable directly or as a FastAPI dependency.
    """
    global _client

    if not settings.redis.url:
        return None

    if _client is None:
        _client = aioredis.Redis.from_url(
            settings.redis.url,
            socket_connect_timeout=settings.redis.connect_timeout,
            decode_responses=True,
        )
        logger.info("Created Redis client")
    return _client


async def close_redis() -> None:
    """Close the shared client (application shutdown)."""
    global _client

    if _client is not None:
        await _client.aclose()
        _client = None


async def get_cache(client: aioredis.Redis | None, key: str) -> Any | None:
    """Read a JSON value; any Redis or decode failure is a cache miss."""
    if client is None:
        return None

    try:
        data = await client.get(key)
    except RedisError as e:
        logger.error(f"Error getting cache for key {key!r}: {e}")
        return None

    if not data:
        return None

    try:
        return json.loads(data)
    except ValueError as e:
        logger.warning(f"Discarding undecodable cache entry {key!r}: {e}")
        return None


async def set_cache(
    client: aioredis.Redis | None,
    key: str,
    value: Any,
    expiration_seconds: int = CACHE_EXPIRATION_SECONDS,
) -> None:
    """Write a JSON value with expiry; failures are logged only."""
    if client is None:
        return

    try:
        await client.set(key, json.dumps(value, default=str), ex=expiration_seconds)
    except RedisError as e:
        logger.error(f"Error setting cache for key {key!r}: {e}")
