"""
FastAPI application entry point.
"""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from msgrelay import __version__
from msgrelay.api.routes import enqueue_router, health_router
from msgrelay.config import Settings, get_settings
from msgrelay.observability.logging import setup_logging
from msgrelay.observability.metrics import get_metrics, setup_metrics
from msgrelay.observability.tracing import instrument_fastapi, setup_tracing
from msgrelay.queue.connection import create_queue_store
from msgrelay.queue.store import QueueStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the shared Redis handle on startup unless one was injected, and
    closes it on shutdown.
    """
    settings: Settings = app.state.settings

    setup_logging(component="api")
    setup_metrics()
    setup_tracing()

    owns_store = app.state.queue_store is None
    if owns_store:
        app.state.queue_store = create_queue_store(settings)

    logger.info(
        "Application started",
        extra={
            "http_addr": settings.http_addr,
            "redis_addr": settings.redis_addr,
            "queue": settings.queue_name,
        },
    )

    yield

    if owns_store:
        await app.state.queue_store.close()
        app.state.queue_store = None
    logger.info("Application shutdown")


async def record_request_metrics(request: Request, call_next):
    """Record request count and latency for every API call."""
    start = time.perf_counter()
    response = await call_next(request)
    get_metrics().record_api_request(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code,
        duration_seconds=time.perf_counter() - start,
    )
    return response


def create_app(
    settings: Settings | None = None,
    queue_store: QueueStore | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Defaults to the cached settings.
        queue_store: Pre-built queue store. When given, the application
            uses it as-is and leaves closing it to the caller.

    Returns:
        FastAPI: The configured application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Message Relay API",
        description="At-least-once message ingestion backed by a Redis list",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.queue_store = queue_store

    app.middleware("http")(record_request_metrics)

    app.include_router(health_router)
    app.include_router(enqueue_router)

    instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
