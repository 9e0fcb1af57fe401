"""Background sweep of expired and over-capacity entries."""

import logging
import threading
from collections.abc import Callable

from sqlcache.clock import Clock
from sqlcache.consts import SWEEPER_JOIN_TIMEOUT, SWEEPER_THREAD_NAME
from sqlcache.storage.base import Store

logger = logging.getLogger(__name__)


class Sweeper:
    """Runs sweeps on a fixed interval and on demand, on its own thread.

    A sweep deletes expired entries, then, when a capacity bound is set,
    every entry beyond the ``max_items`` most recently accessed ones.

    Requests made with trigger() while a sweep is pending collapse into that
    one pending sweep, so the backlog never exceeds a single run. Sweep
    failures are logged and the schedule carries on.
    """

    def __init__(
        self,
        store: Store,
        clock: Clock,
        is_closed: Callable[[], bool],
        interval_ms: int | float,
        max_items: int | float | None = None,
    ):
        """Initialize Sweeper.

        Args:
            store: Store to prune.
            clock: Millisecond clock for expiry checks.
            is_closed: Reports whether the owning cache is closed; a closed
                cache is never swept.
            interval_ms: Period between scheduled sweeps.
            max_items: Capacity bound, or None for unbounded.
        """
        self._store = store
        self._clock = clock
        self._is_closed = is_closed
        self.interval_ms = interval_ms
        self.max_items = max_items
        self._wake = threading.Event()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Whether the sweep thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the periodic schedule. Does nothing once started or stopped."""
        if self._thread is not None or self._stopping.is_set():
            return
        self._thread = threading.Thread(
            target=self._run,
            name=SWEEPER_THREAD_NAME,
            daemon=True,
        )
        self._thread.start()

    def trigger(self) -> None:
        """Request a sweep as soon as possible without waiting for it."""
        self._wake.set()

    def stop(self) -> None:
        """Cancel the schedule and wait for an in-flight sweep to finish."""
        self._stopping.set()
        self._wake.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout=SWEEPER_JOIN_TIMEOUT)
        if thread.is_alive():
            logger.warning(f"Sweeper thread still running after {SWEEPER_JOIN_TIMEOUT}s")

    def _run(self) -> None:
        interval = self.interval_ms / 1000
        while not self._stopping.is_set():
            self._wake.wait(interval)
            self._wake.clear()
            if self._stopping.is_set():
                break
            self.sweep_once()

    def sweep_once(self) -> int:
        """Run one sweep now, in the calling thread.

        Returns:
            Number of entries removed. 0 when skipped or failed.
        """
        if self._is_closed():
            logger.debug("Skipping sweep of closed cache")
            return 0

        try:
            removed = self._store.delete_expired(self._clock())
            if self.max_items is not None:
                removed += self._store.delete_excess_by_recency(self.max_items)
        except Exception:
            logger.exception("Error in sqlcache when checking for expired items")
            return 0

        if removed:
            logger.debug(f"Sweep removed {removed} entries")
        return removed
