"""Cache module for the read-through gateway."""

from .freshness_cache import FreshnessCache
from .models import CacheEntry
from .rwlock import ReadWriteLock
from .statistics import CacheStatistics

__all__ = ["FreshnessCache", "CacheEntry", "ReadWriteLock", "CacheStatistics"]
