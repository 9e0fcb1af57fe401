"""Cache core: policy, sweeping and the public cache class."""

from sqlcache.cache.compression import CompressionResult, decide_compression, decompress
from sqlcache.cache.sqlite_cache import CacheState, SQLiteCache
from sqlcache.cache.sweeper import Sweeper

__all__ = [
    "CacheState",
    "CompressionResult",
    "SQLiteCache",
    "Sweeper",
    "decide_compression",
    "decompress",
]
