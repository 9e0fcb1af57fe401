"""Millisecond wall clock used for expiry and recency timestamps."""

import threading
import time
from collections.abc import Callable

Clock = Callable[[], int]


class WallClock:
    """Milliseconds since the epoch, never going backwards within a process.

    A wall clock step backwards (NTP adjustment) would otherwise break the
    ordering of last-access timestamps, so readings are clamped to the
    highest value handed out so far.
    """

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        now = time.time_ns() // 1_000_000
        with self._lock:
            if now < self._last:
                now = self._last
            self._last = now
        return now


now_ms = WallClock()
