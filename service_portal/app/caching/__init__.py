"""
Portal caching package.

Holds short-lived, process-local copies of data store reads. Entries expire
lazily after their TTL; writes invalidate explicitly after they succeed.
"""

from .keys import generate_cache_key
from .query_cache import QueryCache
from .ttl_store import CacheEntry, CacheStats, DEFAULT_TTL_SECONDS, TTLStore

__all__ = [
    "CacheEntry",
    "CacheStats",
    "DEFAULT_TTL_SECONDS",
    "QueryCache",
    "TTLStore",
    "generate_cache_key",
]
