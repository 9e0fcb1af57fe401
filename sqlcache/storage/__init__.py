"""Stores persisting cache entries.

This module provides:
- Store: Abstract base class for stores
- SQLiteStore: SQLite-backed store
- MemoryStore: Dictionary-backed store
"""

from sqlcache.storage.base import Store
from sqlcache.storage.memory_store import MemoryStore
from sqlcache.storage.sqlite_store import SQLiteStore

__all__ = [
    "MemoryStore",
    "SQLiteStore",
    "Store",
]
