"""In-memory map from resource key to the latest successful upstream response."""

import time
from typing import Callable, Dict, List, Optional

from .models import CacheEntry
from .rwlock import ReadWriteLock


class FreshnessCache:
    """
    Concurrency-safe store of cached payloads with time-based staleness.

    Lookups take the shared side of a :class:`ReadWriteLock` and stores take
    the exclusive side, each only for the single dictionary operation. No
    I/O ever happens under the lock. Entries are never evicted: a stale
    entry stays in place until the next successful fetch replaces it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    def now(self) -> float:
        """Current instant on the clock used to compute expiries."""
        return self._clock()

    async def lookup(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` whether or not it is still fresh."""
        async with self._lock.read():
            return self._entries.get(key)

    async def store(self, key: str, payload: bytes, ttl_seconds: float) -> CacheEntry:
        """Insert or wholesale replace the entry for ``key``."""
        entry = CacheEntry(payload=bytes(payload), expires_at=self.now() + ttl_seconds)
        async with self._lock.write():
            self._entries[key] = entry
        return entry

    def keys(self) -> List[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
