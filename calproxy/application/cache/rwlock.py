"""Shared/exclusive lock built on anyio primitives."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import anyio


class ReadWriteLock:
    """Reader/writer lock for coroutines.

    Any number of readers may hold the lock together. A writer waits until
    no reader or writer holds it and then excludes both. Once a writer is
    waiting, new readers queue behind it so a steady stream of readers
    cannot starve it. Releasing is shielded so a cancelled holder never
    leaves the lock taken.
    """

    def __init__(self) -> None:
        self._condition = anyio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def write_locked(self) -> bool:
        return self._writer

    @property
    def writers_waiting(self) -> int:
        return self._writers_waiting

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._condition:
            while self._writer or self._writers_waiting:
                await self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with anyio.CancelScope(shield=True):
                async with self._condition:
                    self._readers -= 1
                    if self._readers == 0:
                        self._condition.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    await self._condition.wait()
            finally:
                self._writers_waiting -= 1
                # readers parked behind a cancelled writer must re-check
                self._condition.notify_all()
            self._writer = True
        try:
            yield
        finally:
            with anyio.CancelScope(shield=True):
                async with self._condition:
                    self._writer = False
                    self._condition.notify_all()
