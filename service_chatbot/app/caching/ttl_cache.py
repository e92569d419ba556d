"""
In-memory TTL cache for the chat gateway.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from cachetools import TLRUCache

from shared.logging import get_logger


DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ENTRIES = 256


@dataclass(frozen=True)
class CacheEntry:
    """A cached value together with its lifetime."""

    key: str
    value: Any
    inserted_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.inserted_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.expires_at


class TTLCache:
    """Key/value store whose entries disappear ``ttl`` seconds after being set.

    Backed by :class:`cachetools.TLRUCache` so each entry carries its own
    lifetime. An entry is visible while ``now < inserted_at + ttl``; expired
    entries are purged by the next operation that touches the store.
    cachetools is not thread-safe, so every operation runs under one lock and
    concurrent writers to the same key resolve as last-write-wins.
    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        maxsize: int = DEFAULT_MAX_ENTRIES,
    ):
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = default_ttl
        self._clock = clock or time.monotonic
        self._store = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=self._clock)
        self._lock = threading.Lock()
        self.logger = get_logger("chatbot.ttl_cache")

    def get(self, key: str) -> Optional[Any]:
        """Return the live value for ``key`` or None."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` or None, discarding it when expired.

        Use this rather than :meth:`get` when a stored ``None`` must count as a hit.
        """
        with self._lock:
            self._store.expire()
            return self._store.get(key)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> CacheEntry:
        """Store ``value`` under ``key`` for ``ttl`` seconds (default TTL when omitted)."""
        effective_ttl = self.default_ttl if ttl is None else ttl
        if effective_ttl <= 0:
            raise ValueError("ttl must be positive")

        with self._lock:
            entry = CacheEntry(key=key, value=value, inserted_at=self._clock(), ttl=effective_ttl)
            self._store[key] = entry
        return entry

    def delete(self, key: str) -> bool:
        """Evict ``key``. Returns True when a live entry was removed."""
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __contains__(self, key: str) -> bool:
        return self.get_entry(key) is not None

    def __len__(self) -> int:
        """Number of live entries."""
        with self._lock:
            self._store.expire()
            return len(self._store)

    def keys(self) -> List[str]:
        with self._lock:
            self._store.expire()
            return list(self._store.keys())
