from __future__ import annotations

import storage
from storage.cache import BaseCache, MemoryCache


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_entries_expire_after_ttl() -> None:
    clock = _FakeClock()
    cache = MemoryCache(ttl=10, clock=clock)
    cache.set("topics:run_1", ["t1"])

    clock.advance(9)
    assert cache.get("topics:run_1") == ["t1"]
    assert cache.exists("topics:run_1")

    clock.advance(1)
    assert cache.get("topics:run_1") is None
    assert cache.size() == 0


def test_per_entry_ttl_and_no_default_expiry() -> None:
    clock = _FakeClock()
    cache = MemoryCache(clock=clock)
    cache.set("forever", 1)
    cache.set("short", 2, ttl=5)

    clock.advance(3600)
    assert cache.get("forever") == 1
    assert cache.get("short") is None


def test_oldest_entries_evicted_over_max_size() -> None:
    clock = _FakeClock()
    cache = MemoryCache(max_size=2, clock=clock)
    for key in ("a", "b", "c"):
        cache.set(key, key.upper())
        clock.advance(1)

    assert cache.size() == 2
    assert cache.get("a") is None
    assert cache.get("b") == "B"
    assert cache.get("c") == "C"


def test_overwrite_does_not_evict_other_entries() -> None:
    cache = MemoryCache(max_size=2, clock=_FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("b", 3)

    assert cache.get("a") == 1
    assert cache.get("b") == 3


def test_get_or_set_calls_factory_once() -> None:
    cache = MemoryCache(ttl=60, clock=_FakeClock())
    calls = []

    def factory():
        calls.append(1)
        return {"topics": 3}

    assert cache.get_or_set("k", factory) == {"topics": 3}
    assert cache.get_or_set("k", factory) == {"topics": 3}
    assert len(calls) == 1


def test_delete_and_clear() -> None:
    cache = MemoryCache(clock=_FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    cache.delete("missing")
    assert not cache.exists("a")

    cache.clear()
    assert cache.size() == 0


def test_make_key_is_stable() -> None:
    assert BaseCache.make_key("run", project="p", limit=3) == BaseCache.make_key("run", limit=3, project="p")
    assert BaseCache.make_key("run_1") != BaseCache.make_key("run_2")


def test_caches_do_not_share_entries() -> None:
    clock = _FakeClock()
    first = MemoryCache(ttl=60, clock=clock)
    second = MemoryCache(ttl=60, clock=clock)

    first.set("topics:run_1", ["t1"])

    assert second.get("topics:run_1") is None
    assert not hasattr(storage, "get_cache")
