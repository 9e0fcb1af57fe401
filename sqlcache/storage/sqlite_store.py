"""SQLite-backed store.

Entries live in a single ``cache`` table. Every operation is one SQL
statement executed in autocommit mode, which makes each of them atomic.

Table layout:
    cache(key TEXT PRIMARY KEY, value BLOB, expires INT, lastAccess INT, compressed BOOLEAN)
    indexes on expires and lastAccess
"""

import logging
import math
import sqlite3
import threading
from pathlib import Path
from typing import Any

from sqlcache.consts import MEMORY_DATABASE, SQLITE_TIMEOUT
from sqlcache.exceptions import StorageError
from sqlcache.models.model_entry import CacheStats, StoredValue
from sqlcache.storage.base import Store

logger = logging.getLogger(__name__)

_SCHEMA = """
BEGIN;
CREATE TABLE IF NOT EXISTS cache (
    key TEXT PRIMARY KEY,
    value BLOB,
    expires INT,
    lastAccess INT,
    compressed BOOLEAN
);
CREATE INDEX IF NOT EXISTS expires ON cache (expires);
CREATE INDEX IF NOT EXISTS lastAccess ON cache (lastAccess);
COMMIT;
"""

_TOUCH_AND_FETCH = """
UPDATE OR IGNORE cache
SET lastAccess = :now
WHERE key = :key AND (expires > :now OR expires IS NULL)
RETURNING value, compressed
"""

_UPSERT = """
INSERT OR REPLACE INTO cache (key, value, expires, lastAccess, compressed)
VALUES (:key, :value, :expires, :now, :compressed)
"""

_DELETE_KEY = "DELETE FROM cache WHERE key = :key"

_DELETE_ALL = "DELETE FROM cache"

_DELETE_EXPIRED = "DELETE FROM cache WHERE expires < :now"

_DELETE_EXCESS = """
WITH lru AS (SELECT key FROM cache ORDER BY lastAccess DESC LIMIT -1 OFFSET :max_items)
DELETE FROM cache WHERE key IN lru
"""

# Largest OFFSET SQLite accepts; any bigger bound keeps every entry
_SQLITE_MAX_INTEGER = 2**63 - 1

_STATS = """
SELECT
    COUNT(*),
    COALESCE(SUM(expires IS NOT NULL AND expires <= :now), 0),
    COALESCE(SUM(compressed), 0),
    COALESCE(SUM(LENGTH(value)), 0)
FROM cache
"""


def _is_memory(database: str) -> bool:
    return database in (MEMORY_DATABASE, "")


class SQLiteStore(Store):
    """Store backed by a single SQLite connection.

    The connection is shared between the caller's thread and the sweeper
    thread; statements are serialized with an internal lock.
    """

    def __init__(self, database: str = MEMORY_DATABASE, timeout: float = SQLITE_TIMEOUT):
        """Open (and if needed create) the cache database.

        Args:
            database: Path of the database file, or ':memory:'.
            timeout: Seconds to wait when the database file is locked.

        Raises:
            StorageError: If the database cannot be opened or initialized.
        """
        self.database = database
        self._lock = threading.Lock()
        self._closed = False

        if not _is_memory(database):
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        conn = None
        try:
            conn = sqlite3.connect(
                database,
                timeout=timeout,
                isolation_level=None,
                check_same_thread=False,
            )
            conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            raise StorageError(f"Failed to open cache database {database}: {e}") from e

        self._conn = conn
        logger.debug(f"Opened SQLite store at {database}")

    def _execute(self, sql: str, params: dict[str, Any] | None = None) -> tuple[list, int]:
        """Run one statement and return its rows and the number of rows changed."""
        with self._lock:
            if self._closed:
                raise StorageError(f"Store {self.database} is closed")
            try:
                before = self._conn.total_changes
                rows = self._conn.execute(sql, params or {}).fetchall()
                return rows, self._conn.total_changes - before
            except (sqlite3.Error, OverflowError) as e:
                raise StorageError(f"SQLite error on {self.database}: {e}") from e

    def touch_and_fetch(self, key: str, now: int) -> StoredValue | None:
        rows, _ = self._execute(_TOUCH_AND_FETCH, {"key": key, "now": now})
        if not rows:
            return None
        value, compressed = rows[0]
        return StoredValue(value=bytes(value), compressed=bool(compressed))

    def upsert(
        self,
        key: str,
        value: bytes,
        expires_at: int | float | None,
        now: int,
        compressed: bool,
    ) -> None:
        self._execute(
            _UPSERT,
            {
                "key": key,
                "value": value,
                "expires": expires_at,
                "now": now,
                "compressed": 1 if compressed else 0,
            },
        )

    def delete_key(self, key: str) -> None:
        self._execute(_DELETE_KEY, {"key": key})

    def delete_all(self) -> None:
        self._execute(_DELETE_ALL)

    def delete_expired(self, now: int) -> int:
        _, count = self._execute(_DELETE_EXPIRED, {"now": now})
        return count

    def delete_excess_by_recency(self, max_items: int | float) -> int:
        bound = min(math.floor(max_items), _SQLITE_MAX_INTEGER)
        _, count = self._execute(_DELETE_EXCESS, {"max_items": bound})
        return count

    def stats(self, now: int) -> CacheStats:
        rows, _ = self._execute(_STATS, {"now": now})
        total, expired, compressed, size = rows[0]
        return CacheStats(
            total_entries=total,
            expired_entries=expired,
            compressed_entries=compressed,
            total_bytes=size,
        )

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._conn.close()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to close cache database {self.database}: {e}") from e
        logger.debug(f"Closed SQLite store at {self.database}")


def main() -> None:
    """Example usage of SQLiteStore."""
    import tempfile
    import time

    logging.basicConfig(level=logging.DEBUG)

    with tempfile.TemporaryDirectory() as tmpdir:
        store = SQLiteStore(f"{tmpdir}/cache.db")
        now = int(time.time() * 1000)

        print("=== SQLiteStore Example ===\n")
        store.upsert("user:123", b"alice", None, now, False)
        store.upsert("user:456", b"bob", now + 1000, now, False)
        store.upsert("user:789", b"carol", now - 1, now, False)

        print(f"1. user:123 = {store.touch_and_fetch('user:123', now)}")
        print(f"2. user:789 (expired) = {store.touch_and_fetch('user:789', now)}")
        print(f"3. Stats: {store.stats(now)}")
        print(f"4. Expired removed: {store.delete_expired(now)}")
        print(f"5. Excess removed (max 1): {store.delete_excess_by_recency(1)}")
        print(f"6. Stats: {store.stats(now)}")
        store.close()


if __name__ == "__main__":
    main()
