# repository/distributed_cache.py
import json
import logging
from typing import Any, Callable, List, Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from config.cache import close_redis, create_redis

logger = logging.getLogger(__name__)

# Connectivity problems surface as RedisError subclasses or raw socket errors
_CACHE_ERRORS = (RedisError, OSError)


class DistributedCache:
    """
    Redis-backed shared cache. Every operation is best-effort:
    - read failures are reported as a miss,
    - write failures are logged and swallowed.

    The client is created on first use, not at construction.
    """

    def __init__(self, client_factory: Callable[[], Redis] = create_redis) -> None:
        self._factory = client_factory
        self._redis: Optional[Redis] = None

    def _client(self) -> Redis:
        if self._redis is None:
            self._redis = self._factory()
        return self._redis

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._client().get(key)
        except _CACHE_ERRORS as e:
            logger.warning("cache.redis.get.error key=%s err=%s", key, type(e).__name__)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("cache.redis.get.undecodable key=%s", key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            payload = json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError):
            logger.error("cache.redis.set.unserializable key=%s", key)
            return False
        try:
            await self._client().set(key, payload, ex=int(ttl_seconds))
            return True
        except _CACHE_ERRORS as e:
            logger.warning("cache.redis.set.error key=%s err=%s", key, type(e).__name__)
            return False

    async def delete(self, key: str) -> bool:
        try:
            await self._client().delete(key)
            return True
        except _CACHE_ERRORS as e:
            logger.warning("cache.redis.del.error key=%s err=%s", key, type(e).__name__)
            return False

    async def delete_by_pattern(self, pattern: str) -> int:
        """
        Enumerate keys matching the glob `pattern`, then delete them in one batch.
        Returns the number of keys removed (0 when nothing matched or Redis is down).
        """
        try:
            r = self._client()
            keys: List[str] = [k async for k in r.scan_iter(match=pattern, count=500)]
            if not keys:
                return 0
            return int(await r.delete(*keys))
        except _CACHE_ERRORS as e:
            logger.warning(
                "cache.redis.pattern.error pattern=%s err=%s", pattern, type(e).__name__
            )
            return 0

    async def ttl(self, key: str) -> Optional[int]:
        """Seconds left before `key` expires in Redis; None when unknown or unbounded."""
        try:
            remaining = int(await self._client().ttl(key))
        except _CACHE_ERRORS as e:
            logger.warning("cache.redis.ttl.error key=%s err=%s", key, type(e).__name__)
            return None
        return remaining if remaining > 0 else None

    async def ping(self) -> bool:
        try:
            return bool(await self._client().ping())
        except _CACHE_ERRORS:
            return False

    @property
    def client(self) -> Redis:
        """Shared client for other Redis consumers (e.g. the rate limiter)."""
        return self._client()

    async def close(self) -> None:
        client, self._redis = self._redis, None
        try:
            await close_redis(client)
        except _CACHE_ERRORS as e:
            logger.warning("cache.redis.close.error err=%s", type(e).__name__)
