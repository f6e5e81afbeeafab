"""Cache statistics tracking and reporting."""

from typing import Dict, Any
import time

from ...enums import ErrorKind


class CacheStatistics:
    """Tracks read-through outcomes for the stats endpoint."""

    def __init__(self):
        """Initialize cache statistics."""
        self.reset()

    def record_hit(self):
        """Record a request served from a fresh entry."""
        self.cache_hits += 1

    def record_miss(self, expired: bool = False):
        """Record a request that had to go to the origin."""
        self.cache_misses += 1
        if expired:
            self.expired_misses += 1

    def record_store(self, size_bytes: int):
        """Record a payload written to the cache."""
        self.stores += 1
        self.bytes_stored += size_bytes

    def record_failure(self, kind: ErrorKind):
        """Record a failed upstream refresh."""
        self.failures[kind.value] = self.failures.get(kind.value, 0) + 1

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.cache_hits + self.cache_misses
        if total == 0:
            return 0.0
        return self.cache_hits / total

    @property
    def uptime_seconds(self) -> float:
        """Get cache uptime in seconds."""
        return time.time() - self.start_time

    def get_stats(self) -> Dict[str, Any]:
        """Get all statistics as a dictionary."""
        return {
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "expired_misses": self.expired_misses,
            "hit_rate": round(self.hit_rate, 3),
            "stores": self.stores,
            "bytes_stored": self.bytes_stored,
            "upstream_failures": dict(self.failures),
            "uptime_seconds": round(self.uptime_seconds, 1),
        }

    def reset(self):
        """Reset all statistics."""
        self.cache_hits = 0
        self.cache_misses = 0
        self.expired_misses = 0
        self.stores = 0
        self.bytes_stored = 0
        self.failures: Dict[str, int] = {}
        self.start_time = time.time()
