"""
Redis caching service for closed-show summaries.

CACHING STRATEGY
================

What we cache:
  - The summary payload of a closed show, JSON-serialized
  - Cache key pattern: "summaries:show:{show_id}"

Why:
  - A summary is written exactly once, when the show is closed, and never
    changes afterwards, so a cached copy cannot go stale while the show exists
  - Summary screens are reopened far more often than shows are closed

Invalidation strategy:
  - Deleting a show drops its key
  - Deleting a tour or a user drops every "summaries:*" key via SCAN; the
    keyspace is one key per closed show so the scan stays small
  - TTL-based expiry as safety net

Ownership is always checked against the database before the cache is
consulted, so a cached summary is never served to another user.
"""

import json
from typing import Optional

import redis.asyncio as redis

from tourmerch.core.config import get_settings
from tourmerch.core.logging import get_logger
from tourmerch.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.close()
        _redis_client = None


def _make_summary_key(show_id: int) -> str:
    return f"summaries:show:{show_id}"


async def get_cached_summary(show_id: int) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_summary_key(show_id)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=bool(data))
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_summary(show_id: int, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_summary_key(show_id)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", result="stored")
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_show_summary(show_id: int) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        await client.delete(_make_summary_key(show_id))
    except Exception as e:
        logger.error("cache_invalidation_error", show_id=show_id, error=str(e))


async def invalidate_summary_cache() -> None:
    """Drop every cached summary. Used after tour and user purges."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match="summaries:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
