"""
Bounded, time-expiring dedup cache.

Keeps the ids of queries the watcher has already evaluated so a long-running
query is alerted at most once per window instead of once per poll.

Architecture:
    ::

        DedupCache
        ├── capacity      — max live entries (default 100)
        ├── ttl_seconds   — fixed expiry per entry (default 3600)
        ├── LFU eviction  — fewest hits goes first, oldest insert breaks ties
        └── on_evict      — optional (key, value) callback, observability only

        API: get_if_present(key) → value | None
             set(key, value)

Semantics:
    - Expiry is measured from insertion. ``get_if_present`` never refreshes
      the clock; it only bumps the entry's hit count for LFU.
    - Setting an existing key replaces its value and restarts its TTL
      without creating a second entry.
    - Expired entries are purged lazily on lookup and before any eviction.

Examples:
    >>> from prestowatch.core.cache import DedupCache
    >>> cache = DedupCache(capacity=2, ttl_seconds=3600)
    >>> cache.set("q1", 1700000000.0)
    >>> cache.get_if_present("q1")
    1700000000.0
    >>> cache.get_if_present("q2") is None
    True

Guardrails:
    ❌ DON'T: Share one DedupCache between concurrently running cycles
    ✅ DO: Let the single collector thread own it
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_CAPACITY = 100
DEFAULT_TTL_SECONDS = 3600.0

EvictionCallback = Callable[[str, Any], None]


@dataclass
class _Entry:
    value: Any
    expires_at: float
    hits: int
    order: int


class DedupCache:
    """Bounded LFU cache with fixed per-entry TTL.

    Attributes:
        capacity: Maximum number of live entries.
        ttl_seconds: Seconds an entry stays live after insertion.

    Example:
        cache = DedupCache(on_evict=lambda k, v: log.debug("evicted", key=k))
        if cache.get_if_present(query_id) is None:
            ...
            cache.set(query_id, time.time())
    """

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_CAPACITY,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        on_evict: EvictionCallback | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            capacity: Maximum number of entries before LFU eviction.
            ttl_seconds: Fixed lifetime of each entry.
            on_evict: Called with ``(key, value)`` for capacity evictions.
            clock: Time source, seconds since the epoch.

        Raises:
            ValueError: If capacity or ttl_seconds is not positive.
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._capacity = capacity
        self._ttl = ttl_seconds
        self._on_evict = on_evict
        self._clock = clock
        self._store: dict[str, _Entry] = {}
        self._counter = itertools.count()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get_if_present(self, key: str) -> Any | None:
        """Return the value for ``key``, or ``None`` if absent or expired."""
        entry = self._store.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            del self._store[key]
            return None

        entry.hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Insert or replace ``key``; evicts one entry if at capacity."""
        now = self._clock()
        existing = self._store.get(key)
        if existing is not None:
            existing.value = value
            existing.expires_at = now + self._ttl
            return

        if len(self._store) >= self._capacity:
            self._purge_expired(now)
        if len(self._store) >= self._capacity:
            self._evict_one()

        self._store[key] = _Entry(
            value=value,
            expires_at=now + self._ttl,
            hits=0,
            order=next(self._counter),
        )

    def clear(self) -> None:
        """Remove all entries without calling the eviction callback."""
        self._store.clear()

    def _purge_expired(self, now: float) -> None:
        for key in [k for k, e in self._store.items() if now >= e.expires_at]:
            del self._store[key]

    def _evict_one(self) -> None:
        victim = min(self._store, key=lambda k: (self._store[k].hits, self._store[k].order))
        entry = self._store.pop(victim)
        if self._on_evict is not None:
            self._on_evict(victim, entry.value)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        entry = self._store.get(key)
        return entry is not None and self._clock() < entry.expires_at

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for e in self._store.values() if now < e.expires_at)


__all__ = [
    "DEFAULT_CAPACITY",
    "DEFAULT_TTL_SECONDS",
    "DedupCache",
    "EvictionCallback",
]
