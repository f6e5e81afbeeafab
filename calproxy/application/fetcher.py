"""Read-through orchestration between the freshness cache and the origin."""

import time
from typing import Callable, Optional, Union

import anyio
import httpx

from .cache import CacheStatistics, FreshnessCache
from ..constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
    UPSTREAM_SUCCESS_STATUS,
)
from ..domain.exceptions import (
    InvalidKeyError,
    UpstreamFailure,
    UpstreamReadFailureError,
    UpstreamStatusError,
    UpstreamUnavailableError,
)
from ..domain.models import FetchResult
from ..enums import CacheSource
from ..infrastructure.upstream.transport import UpstreamTransport
from ..logging import debug, info, warning, LogRecord, LogEvent

UpstreamURL = Union[str, Callable[[], str]]


class ReadThroughFetcher:
    """
    Serve a resource from cache while fresh, otherwise refresh it from the origin.

    A refresh is a single GET with no retry. Only a complete 200 response is
    stored; every failure is raised to the caller and leaves the cache as it
    was, so an expired entry is never served as a fallback.

    Concurrent misses for the same key are not coalesced: each one performs
    its own upstream call and its own store, and the last store wins.
    """

    def __init__(
        self,
        cache: FreshnessCache,
        transport: UpstreamTransport,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        timeout_seconds: float = DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
        statistics: Optional[CacheStatistics] = None,
    ) -> None:
        self._cache = cache
        self._transport = transport
        self._ttl_seconds = ttl_seconds
        self._timeout_seconds = timeout_seconds
        self._statistics = statistics or CacheStatistics()

    @property
    def cache(self) -> FreshnessCache:
        return self._cache

    @property
    def statistics(self) -> CacheStatistics:
        return self._statistics

    async def get(
        self,
        key: str,
        upstream_url: UpstreamURL,
        request_id: Optional[str] = None,
    ) -> FetchResult:
        """Return the payload for ``key`` and whether it came from cache.

        Args:
            key: Resource key the payload is cached under
            upstream_url: URL to fetch on a miss, or a callable building it
            request_id: Correlator for log records

        Raises:
            InvalidKeyError: Empty key or URL; the origin is not contacted
            UpstreamUnavailableError: No response could be obtained
            UpstreamStatusError: The origin answered with a non-200 status
            UpstreamReadFailureError: The response body could not be fully read
        """
        if not key:
            raise InvalidKeyError(
                "Resource key must not be empty", key=key, request_id=request_id
            )

        entry = await self._cache.lookup(key)
        if entry is not None and entry.is_fresh(self._cache.now()):
            self._statistics.record_hit()
            debug(
                LogRecord(
                    event=LogEvent.CACHE_HIT.value,
                    message="Serving cached upstream response",
                    request_id=request_id,
                    data={"key": key, "size_bytes": entry.size_bytes},
                )
            )
            return FetchResult(payload=entry.payload, source=CacheSource.Hit)

        url = upstream_url() if callable(upstream_url) else upstream_url
        if not url:
            raise InvalidKeyError(
                "Upstream URL must not be empty", key=key, request_id=request_id
            )

        self._statistics.record_miss(expired=entry is not None)
        debug(
            LogRecord(
                event=LogEvent.CACHE_MISS.value,
                message="Cache miss, fetching from upstream",
                request_id=request_id,
                data={"key": key, "expired": entry is not None, "upstream_url": url},
            )
        )

        start = time.monotonic()
        try:
            payload = await self._fetch(url, request_id)
        except UpstreamFailure as exc:
            self._statistics.record_failure(exc.kind)
            warning(
                LogRecord(
                    event=LogEvent.UPSTREAM_FAILURE.value,
                    message=exc.message,
                    request_id=request_id,
                    data={
                        "key": key,
                        "error_type": exc.kind.value,
                        "upstream_url": url,
                        "upstream_status": getattr(exc, "status_code", None),
                        "upstream_ms": round((time.monotonic() - start) * 1000, 2),
                        **exc.details,
                    },
                )
            )
            raise

        await self._cache.store(key, payload, self._ttl_seconds)
        self._statistics.record_store(len(payload))
        info(
            LogRecord(
                event=LogEvent.CACHE_STORE.value,
                message="Fetched and cached upstream response",
                request_id=request_id,
                data={
                    "key": key,
                    "size_bytes": len(payload),
                    "ttl_seconds": self._ttl_seconds,
                    "upstream_ms": round((time.monotonic() - start) * 1000, 2),
                },
            )
        )
        return FetchResult(payload=payload, source=CacheSource.Miss)

    async def _fetch(self, url: str, request_id: Optional[str]) -> bytes:
        """Perform the GET and translate every failure into the error taxonomy."""
        opened = False
        try:
            with anyio.fail_after(self._timeout_seconds):
                async with self._transport.open(url) as response:
                    opened = True
                    if response.status_code != UPSTREAM_SUCCESS_STATUS:
                        raise UpstreamStatusError(
                            "Upstream error",
                            status_code=response.status_code,
                            upstream_url=url,
                            request_id=request_id,
                        )
                    return await response.read()
        except (httpx.RequestError, httpx.StreamError, TimeoutError) as exc:
            if opened:
                raise UpstreamReadFailureError(
                    "Failed to read upstream response",
                    upstream_url=url,
                    request_id=request_id,
                    details={"cause": type(exc).__name__},
                ) from exc
            raise UpstreamUnavailableError(
                "Upstream unavailable",
                upstream_url=url,
                request_id=request_id,
                details={"cause": type(exc).__name__},
            ) from exc
