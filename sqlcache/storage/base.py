"""Abstract base class for cache stores.

A store persists cache entries and exposes the narrow set of atomic
operations the cache needs. Each operation must be atomic on its own: a
concurrent reader observes either the state before it or the state after it.
"""

from abc import ABC, abstractmethod

from sqlcache.models.model_entry import CacheStats, StoredValue


class Store(ABC):
    """Abstract base class for store implementations.

    Timestamps are milliseconds since the epoch. Implementations raise
    StorageError for any failure of the underlying engine.
    """

    @abstractmethod
    def touch_and_fetch(self, key: str, now: int) -> StoredValue | None:
        """Mark an entry as accessed and return its payload.

        Only applies to entries that exist and have not expired at ``now``.
        Expired entries are neither returned nor touched.

        Args:
            key: Entry key.
            now: Current time, stored as the entry's last access.

        Returns:
            Stored payload and compression flag, or None if absent or expired.
        """
        ...

    @abstractmethod
    def upsert(
        self,
        key: str,
        value: bytes,
        expires_at: int | float | None,
        now: int,
        compressed: bool,
    ) -> None:
        """Insert an entry or fully replace an existing one.

        Args:
            key: Entry key.
            value: Payload bytes.
            expires_at: Absolute expiry time, None for no expiry.
            now: Current time, stored as the entry's last access.
            compressed: Whether the payload is compressed.
        """
        ...

    @abstractmethod
    def delete_key(self, key: str) -> None:
        """Remove one entry. Missing keys are ignored."""
        ...

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every entry."""
        ...

    @abstractmethod
    def delete_expired(self, now: int) -> int:
        """Remove entries whose expiry is strictly before ``now``.

        Returns:
            Number of entries removed.
        """
        ...

    @abstractmethod
    def delete_excess_by_recency(self, max_items: int | float) -> int:
        """Keep only the ``max_items`` most recently accessed entries.

        Returns:
            Number of entries removed.
        """
        ...

    @abstractmethod
    def stats(self, now: int) -> CacheStats:
        """Summarize store contents at ``now``."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources. Safe to call more than once."""
        ...
