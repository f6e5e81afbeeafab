"""Data models for the cache module."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    """One cached upstream response.

    Entries are never mutated; a refresh replaces the whole entry.
    """

    payload: bytes
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        """Return True while ``now`` is strictly before the expiry instant."""
        return self.expires_at > now

    @property
    def size_bytes(self) -> int:
        return len(self.payload)
