"""
taskflow.context.manager -- Read-through / write-through cache over the memory bank.

``ContextCache`` keeps recently used documents in a ``BoundedTTLCache``
keyed by document name.  Reads fall through to the store on a miss;
updates write to the store first and only then touch the cache.  The
authoritative key set always comes from the store.

Writes that bypass the cache (``DocumentStore.write`` called directly)
leave the cached copy stale until ``invalidate`` is called for it.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

from taskflow.context.lru import MISSING, BoundedTTLCache
from taskflow.core.types import Clock
from taskflow.store.documents import DocumentStore

log = logging.getLogger("taskflow.context")


class ContextCache:
    """
    Cache of document contents in front of a ``DocumentStore``.

    Parameters
    ----------
    store : DocumentStore
        Backing memory bank.
    max_entries : int
        Cache capacity (LRU eviction beyond it).
    ttl : float
        Seconds an unaccessed entry stays live.
    clock : callable
        ``() -> float`` seconds, shared with the underlying cache.
    """

    def __init__(
        self,
        store: DocumentStore,
        max_entries: int = 100,
        ttl: float = 900.0,
        clock: Clock = time.time,
    ) -> None:
        self.store = store
        self._cache: BoundedTTLCache[str, Any] = BoundedTTLCache(
            max_entries=max_entries, ttl=ttl, clock=clock
        )

    # -- public API ---------------------------------------------------------

    async def get(self, key: str) -> Any:
        """Cached content for *key*, loading it from the store on a miss.

        Store failures propagate unchanged and nothing is cached.
        """
        cached = self._cache.get(key)
        if cached is not MISSING:
            log.debug("Context cache hit for: %s", key)
            return cached

        log.debug("Context cache miss for: %s, loading from Memory Bank", key)
        try:
            content = await self.store.read(key)
        except Exception as exc:
            log.error("Failed to get context for %s: %s", key, exc)
            raise
        self._cache.set(key, content)
        return content

    async def update(self, key: str, value: Any) -> None:
        """Write *value* through to the store, then cache it.

        If the store write fails the cache is left as it was.
        """
        try:
            await self.store.write(key, value)
        except Exception as exc:
            log.error("Failed to update context for %s: %s", key, exc)
            raise
        self._cache.set(key, value)
        log.debug("Updated context for: %s", key)

    def invalidate(self, key: str) -> None:
        """Drop any cached copy of *key*.  The store is not touched."""
        self._cache.delete(key)
        log.debug("Invalidated cache for: %s", key)

    async def list_keys(self) -> List[str]:
        """All document names, straight from the store."""
        try:
            return await self.store.list()
        except Exception as exc:
            log.error("Failed to get all context keys: %s", exc)
            raise

    async def get_all(self) -> Dict[str, Any]:
        """Every document, name -> content, read through the cache.

        Any single failure aborts the whole aggregate.
        """
        result: Dict[str, Any] = {}
        try:
            for key in await self.store.list():
                result[key] = await self.get(key)
        except Exception as exc:
            log.error("Failed to get complete context: %s", exc)
            raise
        return result

    # -- diagnostics --------------------------------------------------------

    def cached_keys(self) -> List[str]:
        """Keys currently live in the cache (a subset of ``list_keys``)."""
        return self._cache.keys()

    def stats(self) -> Dict[str, Any]:
        """Cache counters for the status endpoint."""
        return self._cache.stats()
