"""
Redis Cache Service
===================

Redis caching layer with connection management, cache operations and the
distributed job lock.

Redis is optional. With ``REDIS_URL`` empty every cache read is a miss,
writes are skipped and job locks are always granted.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from todolist.config import settings

logger = logging.getLogger(__name__)

# Global Redis client instance
_redis_client: Optional[Redis] = None


class CacheNotConfiguredError(RuntimeError):
    """Raised by ``get_redis`` when ``REDIS_URL`` is empty."""


async def init_redis() -> Redis:
    """
    Initialize Redis connection pool and pre-warm a connection.

    Returns:
        Redis client instance
    """
    global _redis_client

    if not settings.cache_enabled:
        raise CacheNotConfiguredError("REDIS_URL is not configured")

    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
            socket_keepalive=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        await _redis_client.ping()
        logger.info("Redis connection established")

    return _redis_client


async def get_redis() -> Redis:
    """Get Redis client, initializing if necessary."""
    if _redis_client is None:
        return await init_redis()

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("Redis connection closed")


class CacheManager:
    """
    Redis cache manager with common operations.

    Key naming convention:
        cache:{module}:{resource}:{identifier}

    Every operation fails open: errors are logged and reported as a miss
    (or ``False``) instead of being raised.
    """

    # Default TTLs in seconds
    TTL_SHORT = 300  # 5 minutes
    TTL_HOUR = 3600  # 1 hour

    @staticmethod
    async def get(key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value if exists, None otherwise
        """
        if not settings.cache_enabled:
            return None
        try:
            client = await get_redis()
            value = await client.get(key)

            if value is None:
                return None

            return json.loads(value)
        except Exception as e:
            logger.warning("Cache get error for key %s: %s", key, e)
            return None

    @staticmethod
    async def set(
        key: str,
        value: Any,
        ttl: int = TTL_SHORT,
    ) -> bool:
        """
        Set value in cache with TTL.

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds (default 5 minutes)

        Returns:
            True if successful, False otherwise
        """
        if not settings.cache_enabled:
            return False
        try:
            client = await get_redis()
            serialized = json.dumps(value, default=str)
            await client.setex(key, ttl, serialized)
            return True
        except Exception as e:
            logger.warning("Cache set error for key %s: %s", key, e)
            return False


# =============================================================================
# Cache Key Builders
# =============================================================================

class CacheKeys:
    """Cache key builders for consistent naming."""

    @staticmethod
    def user_auth(email: str) -> str:
        """Cached user lookup for the authenticated-user resolver."""
        return f"cache:user:auth:{email}"

    @staticmethod
    def job_lock(job: str, slot: str) -> str:
        """Lock held by the replica running *job* for the given time slot."""
        return f"lock:job:{job}:{slot}"


# =============================================================================
# Distributed Job Lock
# =============================================================================

async def acquire_job_lock(job: str, slot: str, ttl: int = CacheManager.TTL_HOUR) -> bool:
    """
    Try to claim a scheduled job run across replicas.

    Args:
        job: Job name
        slot: Identifier of the scheduled run (e.g. its ISO timestamp)
        ttl: Lock lifetime in seconds

    Returns:
        True if this process should run the job. Always True when Redis is
        not configured or unreachable.
    """
    if not settings.cache_enabled:
        return True

    key = CacheKeys.job_lock(job, slot)
    try:
        client = await get_redis()
        result = await client.set(key, "1", ex=ttl, nx=True)
        return result is True
    except Exception as e:
        logger.warning("Job lock error for %s, running without lock: %s", key, e)
        return True
