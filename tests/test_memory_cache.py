"""Tests for the in-process cache tier."""

from repository.memory_cache import MemoryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestMemoryCache:
    def test_get_returns_value_until_ttl_elapses(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("k", '{"a":1}', ttl_seconds=60)

        clock.now += 59
        assert cache.get("k") == '{"a":1}'

        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_non_positive_ttl_is_not_stored(self):
        cache = MemoryCache()
        cache.set("k", "1", ttl_seconds=0)
        assert cache.get("k") is None

    def test_delete_by_pattern_uses_glob_semantics(self):
        cache = MemoryCache()
        cache.set("mediadock:progress:u1:list", "[]", 60)
        cache.set("mediadock:progress:u1:a9", "{}", 60)
        cache.set("mediadock:progress:u2:list", "[]", 60)

        removed = cache.delete_by_pattern("mediadock:progress:u1:*")

        assert removed == 2
        assert cache.get("mediadock:progress:u2:list") == "[]"
        assert cache.delete_by_pattern("nothing:*") == 0

    def test_oldest_entry_is_evicted_past_capacity(self):
        cache = MemoryCache(max_entries=2)
        cache.set("a", "1", 60)
        cache.set("b", "2", 60)
        cache.set("c", "3", 60)

        assert cache.get("a") is None
        assert cache.get("b") == "2"
        assert cache.get("c") == "3"

    def test_instances_do_not_share_state(self):
        first, second = MemoryCache(), MemoryCache()
        first.set("k", "1", 60)
        assert second.get("k") is None

    def test_escaped_pattern_matches_literal_glob_characters(self):
        cache = MemoryCache()
        cache.set("p:u[1]:list", "[]", 60)
        cache.set("p:u1:list", "[]", 60)

        assert cache.delete_by_pattern("p:u\\[1\\]:*") == 1
        assert cache.get("p:u[1]:list") is None
        assert cache.get("p:u1:list") == "[]"
