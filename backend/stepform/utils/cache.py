"""Redis caching utilities for StepForm.

Hydrated templates are read on every runner request but change rarely,
so they are cached in Redis and shared across backend instances.
"""

import functools
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Callable, Optional

import redis.asyncio as redis
from pydantic import BaseModel

from stepform.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(*args, **kwargs) -> str:
    """Generate a deterministic hash from function arguments."""
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True)
    return hashlib.md5(key_data.encode()).hexdigest()


def _serialize(result):
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list) and result and isinstance(result[0], BaseModel):
        return [item.model_dump(mode="json") for item in result]
    return result


def cached(
    ttl: int = 300,
    prefix: str = "cache",
    model: type[BaseModel] | None = None,
):
    """Decorator to cache async function results in Redis.

    Args:
        ttl: Time-to-live in seconds (default: 300 = 5 minutes)
        prefix: Cache key prefix for namespacing
        model: Pydantic model to re-hydrate cache hits into

    Only keyword arguments of simple types take part in the key;
    positional arguments (sessions, repositories) are ignored.

    Example:
        @cached(ttl=300, prefix="wizard_template", model=WizardTemplate)
        async def load_template(db: AsyncSession, *, template_id: str):
            ...

    Cache keys: {prefix}:{function_name}:{kwargs_hash}
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.cache_enabled:
                return await func(*args, **kwargs)

            cache_kwargs = {}
            for k, v in kwargs.items():
                if isinstance(v, (int, str, bool, float, type(None))):
                    cache_kwargs[k] = v
                elif isinstance(v, (date, datetime)):
                    cache_kwargs[k] = v.isoformat()
            key = f"{prefix}:{func.__name__}:{cache_key(**cache_kwargs)}"

            try:
                redis_client = await get_redis()
                cached_value = await redis_client.get(key)
            except redis.RedisError as e:
                logger.warning(f"Redis error (falling back to uncached): {e}")
                return await func(*args, **kwargs)

            if cached_value:
                logger.debug(f"Cache HIT: {key}")
                data = json.loads(cached_value)
                return model.model_validate(data) if model else data

            logger.debug(f"Cache MISS: {key}")
            result = await func(*args, **kwargs)

            try:
                await redis_client.setex(key, ttl, json.dumps(_serialize(result)))
            except redis.RedisError as e:
                logger.warning(f"Redis error (result not cached): {e}")
            return result

        return wrapper

    return decorator


async def invalidate_cache(pattern: str) -> int:
    """Delete every key matching `pattern` (e.g. "wizard_template:*").

    Returns the number of keys removed; Redis failures are logged and
    reported as 0.
    """
    if not settings.cache_enabled:
        return 0
    try:
        redis_client = await get_redis()
        keys = [key async for key in redis_client.scan_iter(match=pattern)]
        if not keys:
            return 0
        deleted = await redis_client.delete(*keys)
        logger.debug(f"Invalidated {deleted} cache keys matching {pattern}")
        return deleted
    except redis.RedisError as e:
        logger.warning(f"Redis error during invalidation of {pattern}: {e}")
        return 0
