"""Unit tests for storyscope.cache.NavigationCache."""

from __future__ import annotations

import pytest

from storyscope.cache import DEFAULT_TTL_SECONDS, NavigationCache
from storyscope.models.storybook import EntryKind, NavEntry, NavigationTree


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now


class CountingLoader:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> NavigationTree:
        self.calls += 1
        entry = NavEntry(name=f"Run {self.calls}", id=f"run--{self.calls}", kind=EntryKind.STORY)
        return NavigationTree(flat_list=[entry])


def _cache() -> tuple[NavigationCache, CountingLoader, FakeClock]:
    loader, clock = CountingLoader(), FakeClock()
    return NavigationCache(loader, ttl_seconds=DEFAULT_TTL_SECONDS, clock=clock), loader, clock


class TestNavigationCache:
    async def test_second_call_within_ttl_is_a_hit(self) -> None:
        cache, loader, clock = _cache()
        first = await cache.get_tree()
        clock.now += 60
        second = await cache.get_tree()
        assert loader.calls == 1
        assert first == second

    async def test_boundary_is_still_fresh(self) -> None:
        cache, loader, clock = _cache()
        await cache.get_tree()
        clock.now += DEFAULT_TTL_SECONDS
        await cache.get_tree()
        assert loader.calls == 1

    async def test_expired_entry_triggers_discovery(self) -> None:
        cache, loader, clock = _cache()
        await cache.get_tree()
        clock.now += DEFAULT_TTL_SECONDS + 1
        tree = await cache.get_tree()
        assert loader.calls == 2
        assert tree.flat_list[0].id == "run--2"

    async def test_force_refresh(self) -> None:
        cache, loader, _ = _cache()
        await cache.get_tree()
        await cache.get_tree(force_refresh=True)
        assert loader.calls == 2

    async def test_refresh_replaces_wholesale(self) -> None:
        cache, _, clock = _cache()
        await cache.get_tree()
        clock.now += DEFAULT_TTL_SECONDS + 1
        tree = await cache.get_tree()
        assert [e.id for e in tree.flat_list] == ["run--2"]

    async def test_peek_and_clear(self) -> None:
        cache, loader, clock = _cache()
        assert cache.peek() is None
        await cache.get_tree()
        entry = cache.peek()
        assert entry is not None
        assert entry.fetched_at == clock.now
        cache.clear()
        assert cache.peek() is None
        await cache.get_tree()
        assert loader.calls == 2

    async def test_loader_error_leaves_cache_empty(self) -> None:
        async def failing() -> NavigationTree:
            raise RuntimeError("page crashed")

        cache = NavigationCache(failing)
        with pytest.raises(RuntimeError):
            await cache.get_tree()
        assert cache.peek() is None
