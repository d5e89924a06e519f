# repository/memory_cache.py
import time
from collections import OrderedDict
from typing import Callable, NamedTuple, Optional
from util.functions import compile_glob


class _Entry(NamedTuple):
    value: str
    expires_at: float


class MemoryCache:
    """
    Process-local TTL cache holding serialized JSON strings.

    Never authoritative: anything here may also be (or have been) in Redis, and
    losing it only costs a recomputation. One instance is created per process in
    the app lifespan and injected where needed; tests build their own.
    """

    def __init__(
        self, max_entries: int = 1024, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._max = max(1, int(max_entries))
        self._clock = clock
        self._items: "OrderedDict[str, _Entry]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: str) -> Optional[str]:
        item = self._items.get(key)
        if item is None:
            return None
        if self._clock() >= item.expires_at:
            del self._items[key]
            return None
        return item.value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            self._items.pop(key, None)
            return
        self._items.pop(key, None)
        self._items[key] = _Entry(value, self._clock() + ttl_seconds)
        while len(self._items) > self._max:
            self._items.popitem(last=False)

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def delete_by_pattern(self, pattern: str) -> int:
        # Same glob dialect as Redis MATCH, backslash escapes included
        matcher = compile_glob(pattern)
        doomed = [k for k in self._items if matcher.fullmatch(k)]
        for k in doomed:
            del self._items[k]
        return len(doomed)
