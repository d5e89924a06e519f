# service/cache_service.py
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from fastapi.responses import JSONResponse
from repository.distributed_cache import DistributedCache
from repository.memory_cache import MemoryCache
from util.constants import CacheTimes
from util.functions import cache_control
from util.timing import timed

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CachePolicy:
    fresh_ttl: int
    stale_ttl: Optional[int] = None
    private: bool = False

    @property
    def header(self) -> str:
        return cache_control(self.fresh_ttl, self.stale_ttl, self.private)


REFERENCE_DATA = CachePolicy(CacheTimes.VERY_LONG, CacheTimes.DAY)
SUBJECT_PRIVATE = CachePolicy(CacheTimes.MEDIUM, None, private=True)
AGGREGATE = CachePolicy(CacheTimes.SHORT, CacheTimes.MEDIUM)


class TieredCache:
    """
    Read-through cache over two tiers:
      1. in-process MemoryCache (fast, never authoritative)
      2. shared DistributedCache (Redis)
    On a full miss the value is computed and written to both tiers with the
    policy's fresh TTL. Values must be JSON-serializable.

    Cache failures never change the result of a read or fail a write: they are
    logged and the call falls through to `compute`.
    """

    def __init__(self, memory: MemoryCache, distributed: DistributedCache) -> None:
        self._memory = memory
        self._distributed = distributed

    async def get_or_compute(
        self, key: str, compute: Callable[[], Awaitable[T]], policy: CachePolicy
    ) -> T:
        raw = self._memory.get(key)
        if raw is not None:
            logger.debug("cache.hit tier=memory key=%s", key)
            return json.loads(raw)

        value = await self._distributed.get(key)
        if value is not None:
            logger.debug("cache.hit tier=redis key=%s", key)
            # The local copy must not outlive the shared one
            remaining = await self._distributed.ttl(key)
            self._remember(key, value, min(policy.fresh_ttl, remaining or policy.fresh_ttl))
            return value

        with timed(logger, "cache.compute", level=logging.DEBUG, key=key):
            value = await compute()

        self._remember(key, value, policy.fresh_ttl)
        await self._distributed.set(key, value, policy.fresh_ttl)
        return value

    def _remember(self, key: str, value: Any, ttl: int) -> None:
        try:
            self._memory.set(key, json.dumps(value, separators=(",", ":")), ttl)
        except (TypeError, ValueError):
            logger.error("cache.memory.unserializable key=%s", key)

    async def invalidate(self, pattern: str) -> int:
        """
        Drop every entry matching the glob `pattern` from both tiers.
        Returns the number of Redis keys removed; never raises.
        """
        local = self._memory.delete_by_pattern(pattern)
        try:
            remote = await self._distributed.delete_by_pattern(pattern)
        except Exception:
            logger.exception("cache.invalidate.error pattern=%s", pattern)
            return 0
        logger.info("cache.invalidate pattern=%s memory=%d redis=%d", pattern, local, remote)
        return remote

    async def ping(self) -> bool:
        return await self._distributed.ping()

    async def invalidate_key(self, key: str) -> None:
        self._memory.delete(key)
        try:
            await self._distributed.delete(key)
        except Exception:
            logger.exception("cache.invalidate.error key=%s", key)


def cached_response(
    data: Any,
    policy: CachePolicy,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    JSON response carrying Cache-Control for the policy:
      public  -> max-age={fresh}, stale-while-revalidate={stale}
      private -> private, max-age={fresh}
    Revalidation itself is left to the HTTP layer in front of us.
    """
    return JSONResponse(
        content=data,
        status_code=status_code,
        headers={"Cache-Control": policy.header, **(headers or {})},
    )
