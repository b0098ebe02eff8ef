"""
Pytest configuration and shared fixtures.
"""

import asyncio
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.asyncio import Redis

from msgrelay.api.main import create_app
from msgrelay.config import Settings
from msgrelay.sink.file import FileResultSink
from msgrelay.worker.main import Worker
from tests.helpers import TEST_QUEUE_NAME, InMemoryQueueStore


@pytest.fixture
def queue_store() -> InMemoryQueueStore:
    return InMemoryQueueStore()


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    """Result sink location inside a directory that does not exist yet."""
    return tmp_path / "data" / "processed.log"


@pytest.fixture
def result_sink(output_path: Path) -> FileResultSink:
    return FileResultSink(output_path)


@pytest.fixture
def test_settings(output_path: Path) -> Settings:
    """Create test settings."""
    return Settings(
        http_addr="127.0.0.1:18080",
        redis_addr="localhost:6379",
        queue_name=TEST_QUEUE_NAME,
        output_path=str(output_path),
        enqueue_timeout_seconds=0.2,
        health_timeout_seconds=0.2,
        max_body_bytes=1024,
        log_level="DEBUG",
        log_format="console",
    )


@pytest.fixture
def make_worker(
    queue_store: InMemoryQueueStore,
    result_sink: FileResultSink,
) -> Callable[..., Worker]:
    """Factory for workers bound to the shared test queue and sink."""

    def factory(**kwargs) -> Worker:
        params = {
            "queue_store": queue_store,
            "result_sink": result_sink,
            "queue_name": TEST_QUEUE_NAME,
            "worker_id": "test-worker",
            "pop_timeout": 0.05,
            "dequeue_backoff": 0.01,
        }
        params.update(kwargs)
        return Worker(**params)

    return factory


@pytest.fixture
def app(test_settings: Settings, queue_store: InMemoryQueueStore) -> FastAPI:
    """Create a FastAPI app wired to the in-memory queue store."""
    return create_app(settings=test_settings, queue_store=queue_store)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def unresponsive_redis() -> AsyncGenerator[Redis]:
    """Redis client pointed at a server that accepts connections and never replies."""
    writers: list[asyncio.StreamWriter] = []

    async def swallow(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writers.append(writer)
        while await reader.read(4096):
            pass

    server = await asyncio.start_server(swallow, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    client = Redis(host="127.0.0.1", port=port, decode_responses=True)
    try:
        yield client
    finally:
        await client.aclose()
        for writer in writers:
            writer.close()
        server.close()
        await server.wait_closed()
