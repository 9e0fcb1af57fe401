"""sqlcache - embedded SQLite key-value cache with TTL, LRU eviction and compression."""

from sqlcache.cache import SQLiteCache
from sqlcache.exceptions import (
    CacheClosedError,
    InvalidConfigurationError,
    SQLCacheError,
    StorageError,
)
from sqlcache.models import CacheConfiguration, CacheItem, CacheStats
from sqlcache.serializers import JsonSerializer, PickleSerializer, Serializer
from sqlcache.storage import MemoryStore, SQLiteStore, Store

__version__ = "0.1.0"

__all__ = [
    "CacheClosedError",
    "CacheConfiguration",
    "CacheItem",
    "CacheStats",
    "InvalidConfigurationError",
    "JsonSerializer",
    "MemoryStore",
    "PickleSerializer",
    "SQLCacheError",
    "SQLiteCache",
    "SQLiteStore",
    "Serializer",
    "Store",
    "StorageError",
]
