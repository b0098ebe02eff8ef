"""
Queue store adapter over Redis lists.

Producers ``LPUSH`` and consumers ``BRPOP``, so a single producer feeding a
single consumer sees FIFO order. Nothing stronger is promised: with several
producers the interleaving is whatever Redis observed.

Pop is destructive. Once ``BRPOP`` returns, the message exists only in the
memory of the process that popped it.
"""

import asyncio
import logging
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from msgrelay.constants import DEFAULT_POP_GRACE_SECONDS
from msgrelay.exceptions import BackingStoreUnavailable

logger = logging.getLogger(__name__)


class QueueStore(Protocol):
    """Contract consumed by the ingestion service and the worker."""

    async def push(self, queue_name: str, payload: str) -> None:
        """Durably append a payload to the queue."""
        ...

    async def blocking_pop(self, queue_name: str, max_wait: float) -> str | None:
        """
        Remove and return the oldest payload, waiting at most ``max_wait`` seconds.

        Returns None when the wait elapsed without a message.

        Raises:
            BackingStoreUnavailable: On transport or protocol failure.
        """
        ...

    async def ping(self) -> None:
        """Liveness probe. Raises BackingStoreUnavailable on failure."""
        ...

    async def length(self, queue_name: str) -> int:
        """Number of payloads still waiting in the queue."""
        ...

    async def close(self) -> None:
        ...


class RedisQueueStore:
    """
    QueueStore backed by a shared ``redis.asyncio.Redis`` client.

    The client is owned by the caller; one instance is safe to share across
    every request of the API process.

    The client carries no socket read timeout, so each ``BRPOP`` is also
    bounded locally at ``max_wait + pop_grace`` seconds. A server that
    accepts the connection but never answers then surfaces as
    ``BackingStoreUnavailable`` instead of a pop that never returns.
    """

    def __init__(self, client: Redis, pop_grace: float = DEFAULT_POP_GRACE_SECONDS):
        self._client = client
        self.pop_grace = pop_grace

    @property
    def client(self) -> Redis:
        return self._client

    async def push(self, queue_name: str, payload: str) -> None:
        try:
            await self._client.lpush(queue_name, payload)
        except RedisError as e:
            raise BackingStoreUnavailable(f"push to {queue_name!r} failed: {e}") from e

    async def blocking_pop(self, queue_name: str, max_wait: float) -> str | None:
        try:
            res = await asyncio.wait_for(
                self._client.brpop([queue_name], timeout=max_wait),
                timeout=max_wait + self.pop_grace,
            )
        except TimeoutError as e:
            raise BackingStoreUnavailable(
                f"pop from {queue_name!r} got no reply within {max_wait + self.pop_grace}s"
            ) from e
        except RedisError as e:
            raise BackingStoreUnavailable(f"pop from {queue_name!r} failed: {e}") from e

        if res is None:
            return None

        # BRPOP replies with (queue_name, payload)
        if len(res) != 2:
            raise BackingStoreUnavailable(f"unexpected BRPOP response: {res!r}")
        return res[1]

    async def ping(self) -> None:
        try:
            await self._client.ping()
        except RedisError as e:
            raise BackingStoreUnavailable(str(e)) from e

    async def length(self, queue_name: str) -> int:
        try:
            return await self._client.llen(queue_name)
        except RedisError as e:
            raise BackingStoreUnavailable(f"llen of {queue_name!r} failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis connection closed")
