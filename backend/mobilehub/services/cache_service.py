# /mobilehub/services/cache_service.py

import json
import logging
from typing import Any, Awaitable, Callable, Optional
import redis.asyncio as redis

from mobilehub.config.settings import settings
from mobilehub.utils.circuit_breaker import CircuitBreaker
from mobilehub.utils.metrics import cache_operations

# This service wraps the Redis cache used for rendered catalog payloads.
# Cache problems are logged and counted but never fail the caller.

logger = logging.getLogger(__name__)

class CacheService:
    def __init__(self, redis_url: str):
        try:
            self.redis_pool = redis.ConnectionPool.from_url(redis_url, max_connections=20)
            self.redis = redis.Redis(connection_pool=self.redis_pool)
            self.circuit_breaker = CircuitBreaker("cache")
        except Exception as e:
            logger.critical(f"Failed to connect to Redis at {redis_url}: {e}")
            self.redis = None # Ensure redis is None if connection fails

    async def get(self, key: str) -> Optional[str]:
        if not self.redis: return None
        try:
            result = await self.circuit_breaker.call(self.redis.get, key)
            cache_operations.labels(operation="get", status="hit" if result else "miss").inc()
            return result.decode('utf-8') if result else None
        except Exception as e:
            cache_operations.labels(operation="get", status="error").inc()
            logger.warning(f"Cache get failed for key {key}: {e}")
            return None

    async def set(self, key: str, value: str, ttl: int = 300):
        if not self.redis: return
        try:
            await self.circuit_breaker.call(self.redis.setex, key, ttl, value)
            cache_operations.labels(operation="set", status="success").inc()
        except Exception as e:
            cache_operations.labels(operation="set", status="error").inc()
            logger.warning(f"Cache set failed for key {key}: {e}")

    async def get_or_set(self, key: str, fetch_func: Callable[[], Awaitable[Any]], ttl: int = 300) -> Any:
        """
        Returns the cached JSON value for `key`, or calls `fetch_func` and caches
        its result. A ttl of 0 bypasses the cache. Errors from `fetch_func`
        propagate to the caller.
        """
        if ttl <= 0:
            return await fetch_func()

        cached_value = await self.get(key)
        if cached_value is not None:
            try:
                return json.loads(cached_value)
            except json.JSONDecodeError:
                logger.warning(f"Discarding undecodable cache entry for key {key}")

        fetched_value = await fetch_func()
        await self.set(key, json.dumps(fetched_value, default=str), ttl)
        return fetched_value

    async def close(self):
        if self.redis:
            await self.redis.aclose()

# Globally accessible instance
cache_service = CacheService(settings.redis_url)
