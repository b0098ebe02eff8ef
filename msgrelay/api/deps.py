"""
FastAPI dependencies.

The queue store handle lives on ``app.state`` and is handed to each request
explicitly; nothing resolves it through a module global.
"""

from typing import Annotated

from fastapi import Depends, Request

from msgrelay.config import Settings
from msgrelay.ingestion.service import IngestionService
from msgrelay.queue.store import QueueStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_queue_store(request: Request) -> QueueStore:
    """
    Get the process-wide queue store.

    Raises:
        RuntimeError: If the application has not been started.
    """
    queue_store = getattr(request.app.state, "queue_store", None)
    if queue_store is None:
        raise RuntimeError("Queue store not initialized. Start the application first.")
    return queue_store


def get_ingestion_service(
    settings: Annotated[Settings, Depends(get_app_settings)],
    queue_store: Annotated[QueueStore, Depends(get_queue_store)],
) -> IngestionService:
    return IngestionService(
        queue_store=queue_store,
        queue_name=settings.queue_name,
        enqueue_timeout=settings.enqueue_timeout_seconds,
        health_timeout=settings.health_timeout_seconds,
    )


IngestionServiceDep = Annotated[IngestionService, Depends(get_ingestion_service)]
