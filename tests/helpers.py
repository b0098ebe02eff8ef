"""
Test doubles and helpers shared across test modules.
"""

import asyncio
import time
from collections import defaultdict, deque
from collections.abc import Callable

import pytest

from msgrelay.exceptions import BackingStoreUnavailable, ResultSinkError

TEST_QUEUE_NAME = "test-messages"


class InMemoryQueueStore:
    """
    QueueStore test double with Redis list semantics.

    LPUSH/BRPOP ordering, destructive pop, and a blocking wait that returns
    None once ``max_wait`` elapses. Flip ``available`` to simulate an outage.
    """

    def __init__(self) -> None:
        self._queues: dict[str, deque[str]] = defaultdict(deque)
        self._cond = asyncio.Condition()
        self.available = True
        self.fail_next_pops = 0
        self.push_delay = 0.0
        self.pop_calls = 0
        self.closed = False

    def _check_available(self) -> None:
        if not self.available:
            raise BackingStoreUnavailable("connection refused")

    async def push(self, queue_name: str, payload: str) -> None:
        if self.push_delay:
            await asyncio.sleep(self.push_delay)
        self._check_available()
        async with self._cond:
            self._queues[queue_name].appendleft(payload)
            self._cond.notify_all()

    async def blocking_pop(self, queue_name: str, max_wait: float) -> str | None:
        self.pop_calls += 1
        if self.fail_next_pops > 0:
            self.fail_next_pops -= 1
            raise BackingStoreUnavailable("connection reset by peer")
        self._check_available()

        queue = self._queues[queue_name]
        async with self._cond:
            try:
                await asyncio.wait_for(
                    self._cond.wait_for(lambda: len(queue) > 0),
                    timeout=max_wait,
                )
            except TimeoutError:
                return None
            return queue.pop()

    async def ping(self) -> None:
        self._check_available()

    async def length(self, queue_name: str) -> int:
        return len(self._queues[queue_name])

    async def close(self) -> None:
        self.closed = True

    def contents(self, queue_name: str) -> list[str]:
        """Entries in pop order."""
        return list(reversed(self._queues[queue_name]))


class FailingResultSink:
    """ResultSink that rejects every append."""

    def __init__(self) -> None:
        self.attempts: list[str] = []

    async def append(self, line: str) -> None:
        self.attempts.append(line)
        raise ResultSinkError("disk full")


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll ``predicate`` until it holds or fail the test."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("condition not met before timeout")
        await asyncio.sleep(0.005)


