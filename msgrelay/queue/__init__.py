"""
Queue module.
Contains the queue store contract and its Redis implementation.
"""

from msgrelay.queue.connection import create_queue_store, create_redis_client
from msgrelay.queue.store import QueueStore, RedisQueueStore

__all__ = [
    "QueueStore",
    "RedisQueueStore",
    "create_redis_client",
    "create_queue_store",
]
