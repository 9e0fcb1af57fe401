"""In-process store keeping entries in a dictionary.

Nothing survives the process. Useful where SQLite is unavailable or
unwanted, and as a fast store for tests.
"""

import logging
import threading

from sqlcache.exceptions import StorageError
from sqlcache.models.model_entry import CacheEntry, CacheStats, StoredValue
from sqlcache.storage.base import Store

logger = logging.getLogger(__name__)


class MemoryStore(Store):
    """Dictionary-backed store with the same semantics as SQLiteStore.

    Recency ties are broken by insertion order, a replaced entry counting as
    newly inserted.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError("Memory store is closed")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def entry(self, key: str) -> CacheEntry | None:
        """Return a copy of the raw entry, expired or not, without touching it."""
        with self._lock:
            self._check_open()
            found = self._entries.get(key)
            return found.model_copy() if found is not None else None

    def keys(self) -> list[str]:
        """List stored keys in insertion order, including expired ones."""
        with self._lock:
            self._check_open()
            return list(self._entries)

    def touch_and_fetch(self, key: str, now: int) -> StoredValue | None:
        with self._lock:
            self._check_open()
            found = self._entries.get(key)
            if found is None or not found.is_live(now):
                return None
            found.last_access_at = now
            return StoredValue(value=found.value, compressed=found.compressed)

    def upsert(
        self,
        key: str,
        value: bytes,
        expires_at: int | float | None,
        now: int,
        compressed: bool,
    ) -> None:
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=expires_at,
            last_access_at=now,
            compressed=compressed,
        )
        with self._lock:
            self._check_open()
            self._entries.pop(key, None)
            self._entries[key] = entry

    def delete_key(self, key: str) -> None:
        with self._lock:
            self._check_open()
            self._entries.pop(key, None)

    def delete_all(self) -> None:
        with self._lock:
            self._check_open()
            self._entries.clear()

    def delete_expired(self, now: int) -> int:
        with self._lock:
            self._check_open()
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.expires_at is not None and entry.expires_at < now
            ]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def delete_excess_by_recency(self, max_items: int | float) -> int:
        with self._lock:
            self._check_open()
            keep = max(int(max_items), 0)
            if len(self._entries) <= keep:
                return 0
            # sorted() is stable: among equal timestamps earlier insertions rank first
            ranked = sorted(
                self._entries.values(), key=lambda e: e.last_access_at, reverse=True
            )
            excess = [entry.key for entry in ranked[keep:]]
            for key in excess:
                del self._entries[key]
            return len(excess)

    def stats(self, now: int) -> CacheStats:
        with self._lock:
            self._check_open()
            entries = list(self._entries.values())
        return CacheStats(
            total_entries=len(entries),
            expired_entries=sum(1 for e in entries if not e.is_live(now)),
            compressed_entries=sum(1 for e in entries if e.compressed),
            total_bytes=sum(len(e.value) for e in entries),
        )

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._entries.clear()
        logger.debug("Closed memory store")
