"""
Redis-backed caching for product listings and report payloads.

Caching is best effort: when Redis is unreachable every call degrades to a
cache miss and the request is served from the database.
"""
import json
import logging
import os
from typing import Any, Dict, Optional

import redis

from gev_api.common.config import env_flag

logger = logging.getLogger(__name__)

# Get Redis connection string from environment variable or use default
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
# Cache TTL in seconds (default: 10 minutes)
DEFAULT_CACHE_TTL = int(os.environ.get("CACHE_TTL", 600))
# Reports change with every sale, keep them short-lived
REPORTS_CACHE_TTL = int(os.environ.get("REPORTS_CACHE_TTL", 60))

CACHE_ENABLED = env_flag("CACHE_ENABLED", True)

PRODUCTS_PREFIX = "produtos"
REPORTS_PREFIX = "relatorios"

# Global Redis client
redis_client = None


def get_redis_client():
    """
    Get or create a Redis client instance.
    """
    global redis_client
    if not CACHE_ENABLED:
        return None

    if redis_client is None:
        try:
            redis_client = redis.Redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True
            )
            # Ping Redis to ensure connection works
            redis_client.ping()
        except redis.exceptions.RedisError as e:
            logger.warning("Redis connection failed: %s. Caching disabled.", e)
            redis_client = None

    return redis_client


async def get_cache(key: str) -> Optional[Any]:
    """
    Get a value from cache by key.

    Args:
        key: The cache key to retrieve

    Returns:
        The cached value if found, otherwise None
    """
    client = get_redis_client()
    if not client:
        return None

    try:
        data = client.get(key)
        if data:
            return json.loads(data)
        return None
    except (redis.exceptions.RedisError, ValueError) as e:
        logger.warning("Cache get error for %s: %s", key, e)
        return None


async def set_cache(key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL) -> bool:
    """
    Set a value in cache with optional TTL.

    Args:
        key: The cache key
        value: The value to cache (must be JSON serializable)
        ttl: Time to live in seconds (default: 10 minutes)

    Returns:
        True if successful, False otherwise
    """
    client = get_redis_client()
    if not client:
        return False

    try:
        serialized = json.dumps(value)
        return bool(client.set(key, serialized, ex=ttl))
    except (redis.exceptions.RedisError, TypeError) as e:
        logger.warning("Cache set error for %s: %s", key, e)
        return False


async def delete_pattern(pattern: str) -> int:
    """
    Delete all keys matching a pattern.

    Args:
        pattern: The pattern to match (e.g., "produtos:*")

    Returns:
        Number of keys deleted
    """
    client = get_redis_client()
    if not client:
        return 0

    try:
        keys = list(client.scan_iter(match=pattern))
        if keys:
            return client.delete(*keys)
        return 0
    except redis.exceptions.RedisError as e:
        logger.warning("Cache delete pattern error for %s: %s", pattern, e)
        return 0


def generate_cache_key(prefix: str, params: Dict[str, Any]) -> str:
    """
    Generate a cache key from a prefix and parameters.

    Args:
        prefix: The prefix for the key (e.g., "produtos")
        params: Dictionary of parameters to include in the key

    Returns:
        A cache key string
    """
    # Sort params to ensure consistent keys
    sorted_params = sorted((k, str(v)) for k, v in params.items() if v is not None)
    param_str = ":".join(f"{k}={v}" for k, v in sorted_params)
    return f"{prefix}:{param_str}" if param_str else prefix


async def invalidate_products() -> None:
    await delete_pattern(f"{PRODUCTS_PREFIX}*")


async def invalidate_reports() -> None:
    await delete_pattern(f"{REPORTS_PREFIX}*")
