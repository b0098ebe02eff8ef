"""
Redis connection management.
Builds the client handle that is shared by everything in one process.
"""

import logging

from redis.asyncio import Redis

from msgrelay.config import Settings, get_settings
from msgrelay.queue.store import RedisQueueStore

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings | None = None) -> Redis:
    """
    Create an async Redis client from settings.

    No socket read timeout is set: ``BRPOP`` holds the connection for its
    whole wait. The store bounds each pop locally and callers bound their
    other operations.

    Args:
        settings: Settings to use. Defaults to the cached settings.

    Returns:
        Redis: A client with string responses.
    """
    settings = settings or get_settings()
    client = Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        decode_responses=True,
        socket_connect_timeout=settings.health_timeout_seconds,
    )
    logger.info(
        "Redis client created",
        extra={"redis_addr": settings.redis_addr, "redis_db": settings.redis_db},
    )
    return client


def create_queue_store(settings: Settings | None = None) -> RedisQueueStore:
    """Create a RedisQueueStore with its own client."""
    return RedisQueueStore(create_redis_client(settings))
