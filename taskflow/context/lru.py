"""
taskflow.context.lru -- Bounded LRU cache with per-entry time-to-live.

One structure enforces both limits:

- capacity: at most ``max_entries`` keys; inserting past that evicts
  the least recently used key.
- expiry: an entry not read or written within ``ttl`` seconds is
  treated as absent on its next lookup and dropped then.

Reads and writes both refresh recency and restart the TTL.  The clock
is injectable so expiry can be tested without sleeping.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Generic, Hashable, Iterator, List, TypeVar

from taskflow.core.types import Clock

log = logging.getLogger("taskflow.context.lru")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


#: Returned by ``get`` on a miss; distinct from any cached value, even None or "".
MISSING: Any = _Missing()


@dataclass
class _Entry(Generic[V]):
    value: V
    touched_at: float


class BoundedTTLCache(Generic[K, V]):
    """
    LRU cache with a fixed capacity and a uniform time-to-live.

    Parameters
    ----------
    max_entries : int
        Maximum number of live keys (must be >= 1).
    ttl : float
        Seconds an entry survives without being accessed.
    clock : callable
        ``() -> float`` seconds; defaults to ``time.time``.
    """

    def __init__(
        self,
        max_entries: int = 100,
        ttl: float = 900.0,
        clock: Clock = time.time,
    ) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.max_entries = max_entries
        self.ttl = ttl
        self.clock = clock
        self._entries: "OrderedDict[K, _Entry[V]]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    # -- public API ---------------------------------------------------------

    def get(self, key: K, default: Any = MISSING) -> Any:
        """Return the live value for *key*, refreshing it; else *default*."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return default

        now = self.clock()
        if self._expired(entry, now):
            del self._entries[key]
            self.expirations += 1
            self.misses += 1
            return default

        entry.touched_at = now
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: K, value: V) -> None:
        """Insert or replace *key*, then evict LRU keys beyond capacity."""
        now = self.clock()
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = _Entry(value=value, touched_at=now)
        else:
            entry.value = value
            entry.touched_at = now
            self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            log.debug("Evicted least recently used key: %s", evicted)

    def delete(self, key: K) -> bool:
        """Remove *key*.  Returns whether anything was removed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Physically drop every expired entry.  Returns the count removed."""
        now = self.clock()
        stale = [k for k, e in self._entries.items() if self._expired(e, now)]
        for k in stale:
            del self._entries[k]
        self.expirations += len(stale)
        return len(stale)

    def keys(self) -> List[K]:
        """Live keys, least recently used first.  Does not refresh them."""
        now = self.clock()
        return [k for k, e in self._entries.items() if not self._expired(e, now)]

    def stats(self) -> Dict[str, Any]:
        return {
            "size": len(self),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
        }

    # -- dunder -------------------------------------------------------------

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._expired(entry, self.clock())

    def __len__(self) -> int:
        return len(self.keys())

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    # -- internal -----------------------------------------------------------

    def _expired(self, entry: _Entry[V], now: float) -> bool:
        return now - entry.touched_at > self.ttl
