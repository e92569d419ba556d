"""
Read-through cache in front of the upstream game-data API.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import UpstreamError
from .ttl_cache import CacheEntry, TTLCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.metaforge_client import MetaForgeClient
    from shared.metrics import MetricsCollector


# (endpoint, cache key, unwrap envelope)
UPSTREAM_ENDPOINTS: Tuple[Tuple[str, str, bool], ...] = (
    ("/quests", "quests", True),
    ("/items", "items", True),
    ("/blueprints", "blueprints", True),
    ("/arcs", "arcs", True),
    ("/events-schedule", "events", True),
    ("/weekly-trials", "weekly-trials-full", False),
)


class CacheManager:
    """Serves upstream payloads from a TTL cache, fetching on miss.

    Failed fetches are never cached, so the next call goes upstream again.
    With ``single_flight`` enabled, concurrent misses on one key share one
    in-flight fetch: every caller gets its result or its error after a single
    time-bounded attempt. Without it every concurrent miss fetches on its own
    and the last store wins.
    """

    def __init__(
        self,
        cache: TTLCache,
        upstream: "MetaForgeClient",
        *,
        metrics: Optional["MetricsCollector"] = None,
        single_flight: bool = True,
    ):
        self.cache = cache
        self.upstream = upstream
        self.metrics = metrics
        self.single_flight = single_flight
        self.logger = get_logger("chatbot.cache_manager")
        self._in_flight: Dict[str, "asyncio.Future[Any]"] = {}
        self._hits = 0
        self._misses = 0

    async def fetch_cached(self, endpoint: str, cache_key: str, unwrap: bool = True) -> Any:
        """Return the payload for ``endpoint``, from cache when fresh."""
        entry = self._lookup(cache_key)
        if entry is not None:
            return entry.value

        if not self.single_flight:
            return await self._fetch_and_store(endpoint, cache_key, unwrap)

        fetch = self._in_flight.get(cache_key)
        if fetch is None:
            fetch = asyncio.ensure_future(self._fetch_and_store(endpoint, cache_key, unwrap))
            self._in_flight[cache_key] = fetch
            fetch.add_done_callback(lambda done, key=cache_key: self._forget(key, done))
        else:
            self.logger.debug("Joining in-flight fetch", cache_key=cache_key)

        # Cancelling one caller leaves the shared fetch running.
        return await asyncio.shield(fetch)

    def _forget(self, cache_key: str, fetch: "asyncio.Future[Any]") -> None:
        if self._in_flight.get(cache_key) is fetch:
            del self._in_flight[cache_key]
        if not fetch.cancelled():
            # Consume the error; every waiter may have been cancelled.
            fetch.exception()

    def _lookup(self, cache_key: str) -> Optional[CacheEntry]:
        entry = self.cache.get_entry(cache_key)
        if entry is not None:
            self._hits += 1
            self.logger.info("Cache hit", cache_key=cache_key)
            self._count("cache_hits_total", cache_key)
            return entry

        self._misses += 1
        self._count("cache_misses_total", cache_key)
        return None

    async def _fetch_and_store(self, endpoint: str, cache_key: str, unwrap: bool) -> Any:
        payload = await self.upstream.fetch(endpoint, unwrap=unwrap)
        self.cache.set(cache_key, payload)
        self.logger.info("Cache miss - fetched from API", cache_key=cache_key, endpoint=endpoint)
        return payload

    def _count(self, metric_name: str, cache_key: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, cache_key=cache_key)

    async def invalidate(self, cache_key: str) -> bool:
        """Drop ``cache_key`` so the next read goes upstream."""
        removed = self.cache.delete(cache_key)
        if removed:
            self.logger.info("Invalidated cache key", cache_key=cache_key)
        return removed

    async def warm_cache(
        self,
        endpoints: Optional[Iterable[Tuple[str, str, bool]]] = None,
    ) -> Dict[str, Any]:
        """
        Pre-load upstream payloads into the cache.

        Returns a summary dictionary with the keys warmed and the errors hit.
        """
        plan: List[Tuple[str, str, bool]] = list(UPSTREAM_ENDPOINTS if endpoints is None else endpoints)
        summary: Dict[str, Any] = {"planned": len(plan), "warmed": [], "errors": {}}

        results = await asyncio.gather(
            *(self.fetch_cached(endpoint, key, unwrap=unwrap) for endpoint, key, unwrap in plan),
            return_exceptions=True,
        )
        for (endpoint, key, _unwrap), outcome in zip(plan, results):
            if isinstance(outcome, UpstreamError):
                self.logger.error("Cache warm task failed", cache_key=key, endpoint=endpoint, error=str(outcome))
                summary["errors"][key] = str(outcome)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            summary["warmed"].append(key)

        self.logger.info(
            "Cache warm completed",
            warmed=len(summary["warmed"]),
            errors=len(summary["errors"]),
        )
        return summary

    def get_cache_stats(self) -> Dict[str, Any]:
        """Hit/miss counters and the live key set."""
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_ratio": (self._hits / total) if total else 0.0,
            "keys": sorted(self.cache.keys()),
            "default_ttl_seconds": self.cache.default_ttl,
            "single_flight": self.single_flight,
        }
