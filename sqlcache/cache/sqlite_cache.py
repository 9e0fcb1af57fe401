"""Embedded key-value cache with TTL expiry, LRU eviction and compression.

Values are serialized to bytes, optionally gzip-compressed, and kept in a
store (SQLite by default). A background sweeper deletes expired entries and
enforces the capacity bound every sweep interval and after every write, so
the bound may be exceeded briefly between sweeps.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from sqlcache.cache.compression import decide_compression, decompress
from sqlcache.cache.sweeper import Sweeper
from sqlcache.clock import Clock, now_ms
from sqlcache.exceptions import CacheClosedError, StorageError
from sqlcache.models.model_configuration import CacheConfiguration
from sqlcache.models.model_entry import CacheItem, CacheStats
from sqlcache.serializers import PickleSerializer, Serializer
from sqlcache.storage.base import Store
from sqlcache.storage.sqlite_store import SQLiteStore

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    """Lifecycle states of a cache. CLOSED is terminal."""

    OPEN = "open"
    CLOSED = "closed"


class SQLiteCache:
    """Key-value cache for a single process.

    Writes are best-effort: set() reports storage failures by returning
    False instead of raising. Reads, deletes and clears propagate them.

    Example:
        with SQLiteCache({"database": "cache.db", "max_items": 1000}) as cache:
            cache.set("user:1", {"name": "Alice"}, ttl_ms=60_000)
            cache.get("user:1")
    """

    def __init__(
        self,
        options: Mapping[str, Any] | CacheConfiguration | None = None,
        *,
        store: Store | None = None,
        serializer: Serializer | None = None,
        clock: Clock | None = None,
    ):
        """Validate options, open the store and start the sweeper.

        Args:
            options: Configuration mapping (database, default_ttl_ms,
                max_items, compress, sweep_interval_ms) or a ready
                CacheConfiguration.
            store: Store to use instead of opening ``options["database"]``
                with SQLite. The cache takes ownership and closes it.
            serializer: Value serializer. Defaults to pickle.
            clock: Millisecond clock. Defaults to the wall clock.

        Raises:
            InvalidConfigurationError: If any option is invalid. No store is
                opened in that case.
            StorageError: If the SQLite database cannot be opened.
        """
        self._config = CacheConfiguration.from_options(options)
        self._serializer = serializer if serializer is not None else PickleSerializer()
        self._clock = clock if clock is not None else now_ms
        self._store = store if store is not None else SQLiteStore(self._config.database)
        self._state = CacheState.OPEN

        self._sweeper = Sweeper(
            store=self._store,
            clock=self._clock,
            is_closed=lambda: self._state is CacheState.CLOSED,
            interval_ms=self._config.sweep_interval_ms,
            max_items=self._config.max_items,
        )
        try:
            self._sweeper.start()
        except RuntimeError:
            self._state = CacheState.CLOSED
            self._store.close()
            raise

        logger.info(f"Opened cache on {self._config.database}")

    def __enter__(self) -> "SQLiteCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SQLiteCache(database={self._config.database!r}, state={self._state.value})"

    @property
    def config(self) -> CacheConfiguration:
        """Effective configuration."""
        return self._config

    @property
    def is_closed(self) -> bool:
        """Whether close() has been called."""
        return self._state is CacheState.CLOSED

    def _ensure_open(self) -> None:
        if self._state is CacheState.CLOSED:
            raise CacheClosedError()

    def get(self, key: str, include_meta: bool = False) -> Any | CacheItem | None:
        """Get a value and mark it as recently used.

        Args:
            key: Entry key.
            include_meta: Wrap the value in a CacheItem reporting the key and
                whether the stored payload is compressed.

        Returns:
            The value (or CacheItem) if present and not expired, None otherwise.
            A cached None is only distinguishable from a miss with
            ``include_meta``.

        Raises:
            CacheClosedError: If the cache is closed.
            StorageError: If the store fails.
        """
        self._ensure_open()
        stored = self._store.touch_and_fetch(key, self._clock())
        if stored is None:
            return None

        payload = decompress(stored.value) if stored.compressed else stored.value
        value = self._serializer.loads(payload)
        if include_meta:
            return CacheItem(value=value, key=key, compressed=stored.compressed)
        return value

    def set(
        self,
        key: str,
        value: Any,
        ttl_ms: int | float | None = None,
        compress: bool | None = None,
    ) -> bool:
        """Store a value, replacing any existing entry for the key.

        Args:
            key: Entry key.
            value: Value to cache; must be serializable.
            ttl_ms: Time-to-live. None falls back to the configured default.
            compress: Compress large payloads. None falls back to the
                configured default.

        Returns:
            True if stored, False if the store failed (the failure is logged).

        Raises:
            CacheClosedError: If the cache is closed.
        """
        self._ensure_open()
        requested = compress if compress is not None else self._config.compress
        result = decide_compression(requested, self._serializer.dumps(value))

        ttl = ttl_ms if ttl_ms is not None else self._config.default_ttl_ms
        now = self._clock()
        expires_at = now + ttl if ttl is not None else None

        try:
            self._store.upsert(key, result.payload, expires_at, now, result.compressed)
        except StorageError:
            logger.error(f"Error in sqlcache when setting cache item {key!r}", exc_info=True)
            return False
        finally:
            self._sweeper.trigger()

        logger.debug(
            f"Cached key={key} ({len(result.payload)} bytes, compressed={result.compressed}, "
            f"ttl={ttl}ms)"
        )
        return True

    def delete(self, key: str) -> None:
        """Remove an entry. Missing keys are ignored.

        Raises:
            CacheClosedError: If the cache is closed.
            StorageError: If the store fails.
        """
        self._ensure_open()
        self._store.delete_key(key)

    def clear(self) -> None:
        """Remove every entry.

        Raises:
            CacheClosedError: If the cache is closed.
            StorageError: If the store fails.
        """
        self._ensure_open()
        self._store.delete_all()

    def sweep(self) -> int:
        """Delete expired and over-capacity entries now, in this thread.

        Returns:
            Number of entries removed.
        """
        self._ensure_open()
        return self._sweeper.sweep_once()

    def stats(self) -> CacheStats:
        """Summarize the stored entries."""
        self._ensure_open()
        return self._store.stats(self._clock())

    def close(self) -> None:
        """Stop the sweeper and release the store. Later calls do nothing."""
        if self._state is CacheState.CLOSED:
            return
        self._state = CacheState.CLOSED
        self._sweeper.stop()
        self._store.close()
        logger.info(f"Closed cache on {self._config.database}")


def main() -> None:
    """Example usage of SQLiteCache."""
    import time

    logging.basicConfig(level=logging.DEBUG)

    with SQLiteCache({"max_items": 2, "compress": True}) as cache:
        print("=== SQLiteCache Example ===\n")

        print("1. Storing values...")
        cache.set("user:123", {"name": "Alice", "email": "alice@example.com"})
        cache.set("user:456", {"name": "Bob"}, ttl_ms=500)
        print(f"   user:123 = {cache.get('user:123')}")

        print("\n2. Large payloads are compressed...")
        cache.set("report", {str(i): i for i in range(5000)})
        item = cache.get("report", include_meta=True)
        print(f"   report compressed: {item.compressed if item else None}")

        print("\n3. Waiting for TTL expiry and eviction...")
        time.sleep(1)
        print(f"   user:456 = {cache.get('user:456')}")
        print(f"   Stats: {cache.stats()}")


if __name__ == "__main__":
    main()
