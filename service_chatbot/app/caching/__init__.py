"""
Chat gateway caching package.

Provides the in-memory TTL store and the read-through manager that puts it
in front of the upstream API. Entries are short-lived and never persisted.
"""

from .ttl_cache import CacheEntry, TTLCache, DEFAULT_TTL_SECONDS
from .cache_manager import CacheManager, UPSTREAM_ENDPOINTS

__all__ = [
    "CacheEntry",
    "TTLCache",
    "DEFAULT_TTL_SECONDS",
    "CacheManager",
    "UPSTREAM_ENDPOINTS",
]
