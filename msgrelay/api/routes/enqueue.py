"""
Message submission routes.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from msgrelay.api.deps import IngestionServiceDep
from msgrelay.exceptions import BackingStoreUnavailable, MessageValidationError
from msgrelay.types.api import EnqueueResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Messages"])


async def read_body_capped(request: Request, limit: int) -> bytes:
    """
    Read at most ``limit`` bytes of the request body.

    The rest of the stream is consumed and discarded so memory use stays
    bounded regardless of what the client sends.
    """
    body = bytearray()
    async for chunk in request.stream():
        remaining = limit - len(body)
        if remaining > 0:
            body += chunk[:remaining]
    return bytes(body)


@router.post(
    "/enqueue",
    response_model=EnqueueResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty message"},
        503: {"model": ErrorResponse, "description": "Queue store unavailable"},
    },
    summary="Enqueue a message",
    description=(
        "Push a message onto the queue. The body is raw text, or a JSON object "
        'with a "message" field when Content-Type is application/json.'
    ),
)
async def enqueue(request: Request, service: IngestionServiceDep) -> EnqueueResponse:
    """
    Enqueue a message.

    Submissions are not idempotent: posting the same text twice enqueues it
    twice.

    Args:
        request: The raw request.
        service: Ingestion service bound to the shared queue store.

    Returns:
        EnqueueResponse describing the accepted message.

    Raises:
        HTTPException: 400 for an empty message, 503 if the queue store
            failed or timed out.
    """
    body = await read_body_capped(request, request.app.state.settings.max_body_bytes)

    try:
        return await service.submit(body, request.headers.get("content-type"))
    except MessageValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except BackingStoreUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="enqueue failed",
        ) from e
