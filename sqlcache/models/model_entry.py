"""Stored entry models and lightweight result types."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """One stored row, referenced by key.

    Timestamps are milliseconds since the epoch.
    """

    key: str = Field(description="Unique identifier")
    value: bytes = Field(description="Serialized, possibly compressed payload")
    expires_at: int | float | None = Field(default=None, description="None never expires")
    last_access_at: int = Field(description="Updated on every read and write")
    compressed: bool = Field(default=False, description="Whether value is gzip data")

    def is_live(self, now: int) -> bool:
        """Check that the entry has not expired at the given time."""
        return self.expires_at is None or self.expires_at > now


class CacheItem(BaseModel):
    """Value returned by get(include_meta=True).

    ``compressed`` reports whether compression was actually applied, which may
    differ from whether it was requested.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any
    key: str
    compressed: bool


class CacheStats(BaseModel):
    """Snapshot of store contents."""

    total_entries: int = Field(default=0, ge=0)
    expired_entries: int = Field(default=0, ge=0, description="Past expiry, not yet swept")
    compressed_entries: int = Field(default=0, ge=0)
    total_bytes: int = Field(default=0, ge=0, description="Sum of stored payload sizes")

    @property
    def live_entries(self) -> int:
        """Entries a get() could still return."""
        return self.total_entries - self.expired_entries


# === Dataclasses (lightweight internal types) ===


@dataclass(frozen=True)
class StoredValue:
    """Payload returned by a store's touch-and-fetch."""

    value: bytes
    compressed: bool
