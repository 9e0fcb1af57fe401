"""Pydantic models for sqlcache."""

from sqlcache.models.model_configuration import CacheConfiguration
from sqlcache.models.model_entry import (
    CacheEntry,
    CacheItem,
    CacheStats,
    StoredValue,
)

__all__ = [
    "CacheConfiguration",
    "CacheEntry",
    "CacheItem",
    "CacheStats",
    "StoredValue",
]
