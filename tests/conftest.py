from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Deque, Iterator, List, Optional

from unittest.mock import MagicMock, patch
import anyio
import pytest


# Configure anyio to only use asyncio backend
@pytest.fixture
def anyio_backend() -> str:
    """Force tests to use asyncio backend only."""
    return "asyncio"


@pytest.fixture(autouse=True, scope="session")
def mock_logger() -> Iterator[MagicMock]:
    with patch("calproxy.logging._logger", MagicMock()) as mock_logger:
        mock_logger.log.return_value = None
        yield mock_logger


class FakeClock:
    """Manually advanced replacement for ``time.monotonic``."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b"",
        read_error: Optional[BaseException] = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.read_error = read_error
        self.read_called = False

    async def read(self) -> bytes:
        self.read_called = True
        if self.read_error is not None:
            raise self.read_error
        return self.body


class FakeTransport:
    """In-memory stand-in for the upstream transport.

    Responses are handed out in queue order; once the queue is empty the
    ``default`` response is reused. When ``gate`` is set, every call blocks
    on it after being recorded, so tests can hold several calls in flight.
    """

    def __init__(self, default: Optional[FakeResponse] = None) -> None:
        self.calls: List[str] = []
        self.responses: Deque[FakeResponse] = deque()
        self.default = default or FakeResponse(200, b"{}")
        self.open_error: Optional[BaseException] = None
        self.gate: Optional[anyio.Event] = None

    def queue(self, *responses: FakeResponse) -> None:
        self.responses.extend(responses)

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[FakeResponse]:
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.open_error is not None:
            raise self.open_error
        yield self.responses.popleft() if self.responses else self.default


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
