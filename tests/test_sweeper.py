"""Tests for the background sweeper."""

import logging
import threading
import time

import pytest
from cache_helpers import FailingStore, ManualClock, wait_for

from sqlcache.cache.sweeper import Sweeper
from sqlcache.consts import SWEEPER_THREAD_NAME
from sqlcache.storage.memory_store import MemoryStore


def _fill(store: MemoryStore, clock: ManualClock, count: int, ttl: int | None = None) -> None:
    for i in range(count):
        expires_at = clock() + ttl if ttl is not None else None
        store.upsert(f"key{i}", b"v", expires_at, clock(), False)
        clock.advance(1)


@pytest.fixture
def sweeper_factory(memory_store: MemoryStore, clock: ManualClock):
    """Factory for sweepers over the memory store, stopped after the test."""
    sweepers: list[Sweeper] = []

    def factory(store=None, interval_ms=60_000, max_items=None, is_closed=lambda: False):
        sweeper = Sweeper(
            store=store if store is not None else memory_store,
            clock=clock,
            is_closed=is_closed,
            interval_ms=interval_ms,
            max_items=max_items,
        )
        sweepers.append(sweeper)
        return sweeper

    yield factory

    for sweeper in sweepers:
        sweeper.stop()


class TestSweepOnce:
    """Tests for a single sweep."""

    def test_removes_expired(self, sweeper_factory, memory_store, clock) -> None:
        """Test that expired entries are removed."""
        _fill(memory_store, clock, 3, ttl=10)
        memory_store.upsert("forever", b"v", None, clock(), False)
        clock.advance(100)

        assert sweeper_factory().sweep_once() == 3
        assert memory_store.keys() == ["forever"]

    def test_enforces_capacity(self, sweeper_factory, memory_store, clock) -> None:
        """Test that only the most recently accessed entries are kept."""
        _fill(memory_store, clock, 6)
        memory_store.touch_and_fetch("key0", clock())

        assert sweeper_factory(max_items=3).sweep_once() == 3
        assert sorted(memory_store.keys()) == ["key0", "key4", "key5"]

    def test_expiry_before_capacity(self, sweeper_factory, memory_store, clock) -> None:
        """Test that expired entries do not take up capacity."""
        _fill(memory_store, clock, 2)
        memory_store.upsert("recent_but_expired", b"v", clock() + 1, clock(), False)
        clock.advance(5)

        assert sweeper_factory(max_items=2).sweep_once() == 1
        assert sorted(memory_store.keys()) == ["key0", "key1"]

    def test_unbounded_keeps_everything(self, sweeper_factory, memory_store, clock) -> None:
        """Test that no capacity eviction happens without a bound."""
        _fill(memory_store, clock, 50)
        assert sweeper_factory().sweep_once() == 0
        assert len(memory_store) == 50

    def test_skips_closed_cache(self, sweeper_factory, memory_store, clock) -> None:
        """Test that a closed owner is never swept."""
        _fill(memory_store, clock, 3, ttl=1)
        clock.advance(10)

        assert sweeper_factory(is_closed=lambda: True).sweep_once() == 0
        assert len(memory_store) == 3

    def test_failure_is_logged_not_raised(self, sweeper_factory, clock, caplog) -> None:
        """Test that store errors are swallowed and logged."""
        store = FailingStore("delete_expired")
        with caplog.at_level(logging.ERROR, logger="sqlcache.cache.sweeper"):
            assert sweeper_factory(store=store).sweep_once() == 0

        assert "checking for expired items" in caplog.text
        assert "simulated delete_expired failure" in caplog.text


class TestSchedule:
    """Tests for the sweep thread."""

    def test_start_and_stop(self, sweeper_factory) -> None:
        """Test the thread lifecycle."""
        sweeper = sweeper_factory()
        sweeper.start()
        assert sweeper.running
        assert any(t.name == SWEEPER_THREAD_NAME for t in threading.enumerate())

        sweeper.stop()
        assert not sweeper.running

    def test_stop_is_idempotent(self, sweeper_factory) -> None:
        """Test stopping twice, and stopping a sweeper never started."""
        never_started = sweeper_factory()
        never_started.stop()

        sweeper = sweeper_factory()
        sweeper.start()
        sweeper.stop()
        sweeper.stop()
        assert not sweeper.running

    def test_no_restart_after_stop(self, sweeper_factory) -> None:
        """Test that a stopped schedule stays stopped."""
        sweeper = sweeper_factory()
        sweeper.start()
        sweeper.stop()
        sweeper.start()
        assert not sweeper.running

    def test_periodic_sweep(self, sweeper_factory, memory_store, clock) -> None:
        """Test that sweeps run on the interval without triggers."""
        _fill(memory_store, clock, 3, ttl=1)
        clock.advance(10)

        sweeper = sweeper_factory(interval_ms=20)
        sweeper.start()
        assert wait_for(lambda: len(memory_store) == 0)

    def test_trigger_runs_sweep(self, sweeper_factory, memory_store, clock) -> None:
        """Test that trigger() sweeps without waiting for the interval."""
        sweeper = sweeper_factory(interval_ms=60_000, max_items=2)
        sweeper.start()
        _fill(memory_store, clock, 5)

        sweeper.trigger()
        assert wait_for(lambda: len(memory_store) == 2)

    def test_triggers_coalesce(self, sweeper_factory, clock) -> None:
        """Test that a burst of triggers does not queue a sweep per trigger."""
        calls: list[int] = []
        release = threading.Event()

        class SlowStore(MemoryStore):
            def delete_expired(self, now):
                calls.append(now)
                release.wait(2.0)
                return 0

        sweeper = sweeper_factory(store=SlowStore(), interval_ms=60_000)
        sweeper.start()
        sweeper.trigger()
        assert wait_for(lambda: len(calls) == 1)

        # Sweep in flight: these collapse into one pending run
        for _ in range(20):
            sweeper.trigger()
        release.set()

        assert wait_for(lambda: len(calls) == 2)
        sweeper.stop()
        assert len(calls) == 2

    def test_failures_do_not_stop_schedule(self, sweeper_factory, clock) -> None:
        """Test that the thread survives a failing sweep."""
        store = FailingStore("delete_expired")
        sweeper = sweeper_factory(store=store, interval_ms=10)
        sweeper.start()
        store.upsert("key1", b"v", clock() + 1, clock(), False)
        clock.advance(10)

        time.sleep(0.1)
        assert sweeper.running

        store.failing.clear()
        assert wait_for(lambda: len(store) == 0)
