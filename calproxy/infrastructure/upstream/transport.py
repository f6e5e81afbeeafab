"""
Blocking-GET abstraction over httpx used by the read-through fetcher.

The transport only moves bytes. Deciding what a status code or a broken
body means is left to the caller, which sees two distinct failure phases:
opening the response (connect, DNS, timeout before headers) and reading
the body.
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Protocol

import httpx


class UpstreamResponse:
    """Status line plus a lazily read body."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def read(self) -> bytes:
        """Read the full body.

        Raises:
            httpx.RequestError: The connection broke or the body could not be decoded
            httpx.StreamError: The body stream was already consumed or closed
        """
        return await self._response.aread()


class UpstreamTransport(Protocol):
    def open(self, url: str) -> AsyncContextManager[UpstreamResponse]: ...


class HttpxUpstreamTransport:
    """Streamed GET over a shared :class:`httpx.AsyncClient`.

    Entering ``open`` raises ``httpx.RequestError`` when no response could be
    obtained. The client's timeout bounds each phase of the call.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[UpstreamResponse]:
        async with self._client.stream("GET", url) as response:
            yield UpstreamResponse(response)
