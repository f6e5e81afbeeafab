"""Domain value objects shared between the fetcher and the HTTP layer."""

from dataclasses import dataclass

from ..enums import CacheSource


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a successful read-through fetch.

    Attributes:
        payload: Upstream response body, byte-for-byte.
        source: Whether the payload was served from cache or freshly fetched.
    """

    payload: bytes
    source: CacheSource

    @property
    def is_hit(self) -> bool:
        return self.source is CacheSource.Hit
