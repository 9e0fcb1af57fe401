"""Pytest configuration and fixtures."""

import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from cache_helpers import ManualClock

from sqlcache.cache.sqlite_cache import SQLiteCache
from sqlcache.storage.memory_store import MemoryStore


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock() -> ManualClock:
    """Create a manual clock."""
    return ManualClock()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Create an empty memory store."""
    return MemoryStore()


@pytest.fixture
def make_cache(clock: ManualClock) -> Iterator[Callable[..., SQLiteCache]]:
    """Factory for caches driven by the manual clock, closed after the test."""
    caches: list[SQLiteCache] = []

    def factory(options: dict | None = None, **kwargs) -> SQLiteCache:
        kwargs.setdefault("clock", clock)
        cache = SQLiteCache(options, **kwargs)
        caches.append(cache)
        return cache

    yield factory

    for cache in caches:
        cache.close()
