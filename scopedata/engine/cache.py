# scopedata/engine/cache.py
from __future__ import annotations

import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

DEFAULT_TTL = 5 * 60.0
DEFAULT_CAPACITY = 100
DEFAULT_EVICTION_FRACTION = 0.2


@dataclass(frozen=True, slots=True)
class CacheKey:
    channel_id: str
    start_time: float
    end_time: float
    max_points: int
    align_to_factor: int | None = None


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    key: Hashable
    result: V
    inserted_at: float


@dataclass(frozen=True, slots=True)
class CacheStatus:
    entries: int
    ttl: float
    capacity: int
    hits: int
    misses: int

    def to_dict(self) -> dict:
        return {
            "entries": self.entries,
            "ttl": self.ttl,
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
        }


class ResultCache(Generic[V]):
    """
    TTL- and capacity-bounded LRU cache of resample results.

    Entries expire `ttl` seconds after insertion and are dropped lazily when
    read. Every hit moves the entry to the most-recent end; once the entry
    count exceeds `capacity`, the least recently used
    ``ceil(capacity * eviction_fraction)`` entries are evicted together.

    There is no locking. Two identical concurrent requests may both miss and
    both compute; values are immutable and keyed by the exact request, so the
    second `put` just replaces an equal result.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        capacity: int = DEFAULT_CAPACITY,
        *,
        eviction_fraction: float = DEFAULT_EVICTION_FRACTION,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if not 0 < eviction_fraction <= 1:
            raise ValueError("eviction_fraction must be in (0, 1]")
        self.ttl = float(ttl)
        self.capacity = int(capacity)
        self.eviction_fraction = float(eviction_fraction)
        self._clock = clock
        self._entries: OrderedDict[Hashable, CacheEntry[V]] = OrderedDict()
        self._closed = False
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._expired(entry)

    def _expired(self, entry: CacheEntry[V]) -> bool:
        return self._clock() - entry.inserted_at >= self.ttl

    def get(self, key: Hashable) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._expired(entry):
            del self._entries[key]
            self.misses += 1
            logger.debug("Cache entry expired: %s", key)
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.result

    def put(self, key: Hashable, result: V) -> None:
        if self._closed:
            return
        self._entries[key] = CacheEntry(key, result, self._clock())
        self._entries.move_to_end(key)
        if len(self._entries) > self.capacity:
            self._evict()

    @property
    def eviction_batch(self) -> int:
        return max(1, math.ceil(self.capacity * self.eviction_fraction))

    def _evict(self) -> None:
        batch = min(self.eviction_batch, len(self._entries))
        for _ in range(batch):
            self._entries.popitem(last=False)
        logger.debug("Evicted %d least recently used cache entries", batch)

    def purge_expired(self) -> int:
        """Drop every expired entry now instead of on read."""
        stale = [k for k, e in self._entries.items() if self._expired(e)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cleared resample cache (%d entries)", count)
        return count

    def close(self) -> None:
        """End of the cache's lifecycle: drop everything and refuse new entries."""
        self.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def status(self) -> CacheStatus:
        return CacheStatus(
            entries=len(self._entries),
            ttl=self.ttl,
            capacity=self.capacity,
            hits=self.hits,
            misses=self.misses,
        )
