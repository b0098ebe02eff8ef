"""
Ingestion service.

Turns a producer submission into exactly one queue entry, or into an error
the caller must act on. There is no idempotency: the same payload submitted
twice becomes two independent entries.
"""

import asyncio
import json
import logging
from typing import Any

from pydantic import ValidationError

from msgrelay.constants import (
    DEFAULT_ENQUEUE_TIMEOUT_SECONDS,
    DEFAULT_HEALTH_TIMEOUT_SECONDS,
    JSON_CONTENT_TYPE,
    SPAN_ENQUEUE_MESSAGE,
)
from msgrelay.exceptions import BackingStoreUnavailable, MessageValidationError
from msgrelay.observability.metrics import get_metrics
from msgrelay.observability.tracing import get_tracer
from msgrelay.queue.store import QueueStore
from msgrelay.types.api import EnqueueRequest, EnqueueResponse

logger = logging.getLogger(__name__)


def is_json_content_type(content_type: str | None) -> bool:
    return bool(content_type) and JSON_CONTENT_TYPE in content_type.lower()


def extract_message(body: bytes, content_type: str | None) -> str:
    """
    Normalize a raw request body into the message text.

    With a JSON content type, the ``message`` field of a JSON object is
    used; the key matches case-insensitively, an exact ``message`` key
    winning. A body that does not decode into an ``EnqueueRequest``
    (invalid JSON, not an object, non-string ``message``) falls back to
    the raw text, so a client mislabelling plain text still gets it
    enqueued.

    Args:
        body: Raw request body (already size-capped).
        content_type: Value of the Content-Type header, if any.

    Returns:
        The trimmed message; may be empty.
    """
    text = body.decode("utf-8", errors="replace")
    msg = text.strip()

    if is_json_content_type(content_type):
        try:
            data = json.loads(text)
        except ValueError:
            return msg
        if data is None:
            return ""
        if not isinstance(data, dict):
            return msg
        try:
            request = EnqueueRequest.model_validate(_request_fields(data))
        except ValidationError:
            return msg
        msg = request.message.strip()

    return msg


def _request_fields(data: dict[str, Any]) -> dict[str, Any]:
    if "message" in data:
        value = data["message"]
    else:
        value = next((v for k, v in data.items() if k.lower() == "message"), None)
    # null leaves the field at its default
    return {} if value is None else {"message": value}


class IngestionService:
    """
    Validates submissions and forwards them to the queue store.

    The store handle is injected; each request may call ``submit``
    concurrently since the service holds no mutable state of its own.
    """

    def __init__(
        self,
        queue_store: QueueStore,
        queue_name: str,
        enqueue_timeout: float = DEFAULT_ENQUEUE_TIMEOUT_SECONDS,
        health_timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
    ):
        self.queue_store = queue_store
        self.queue_name = queue_name
        self.enqueue_timeout = enqueue_timeout
        self.health_timeout = health_timeout
        self._metrics = get_metrics()

    async def submit(self, body: bytes, content_type: str | None = None) -> EnqueueResponse:
        """
        Accept a submission and enqueue it.

        Args:
            body: Raw request body.
            content_type: Content-Type hint from the producer.

        Returns:
            EnqueueResponse echoing the queue and normalized message.

        Raises:
            MessageValidationError: If the message is empty.
            BackingStoreUnavailable: If the push failed or timed out. The
                message was not enqueued and the caller should retry.
        """
        msg = extract_message(body, content_type)
        if not msg:
            self._metrics.record_enqueue_failure(self.queue_name, "validation")
            raise MessageValidationError("message is required")

        with get_tracer().start_as_current_span(SPAN_ENQUEUE_MESSAGE) as span:
            span.set_attribute("queue", self.queue_name)
            try:
                await asyncio.wait_for(
                    self.queue_store.push(self.queue_name, msg),
                    timeout=self.enqueue_timeout,
                )
            except TimeoutError as e:
                self._metrics.record_enqueue_failure(self.queue_name, "timeout")
                logger.error(
                    "Enqueue failed",
                    extra={"queue": self.queue_name, "error": "timeout"},
                )
                raise BackingStoreUnavailable(
                    f"enqueue timed out after {self.enqueue_timeout}s"
                ) from e
            except BackingStoreUnavailable as e:
                self._metrics.record_enqueue_failure(self.queue_name, "unavailable")
                logger.error(
                    "Enqueue failed",
                    extra={"queue": self.queue_name, "error": str(e)},
                )
                raise

        self._metrics.record_enqueued(self.queue_name)
        logger.info(
            "Enqueued message",
            extra={"queue": self.queue_name, "payload": msg},
        )

        return EnqueueResponse(enqueued=True, queue=self.queue_name, message=msg)

    async def check_health(self) -> None:
        """
        Probe the queue store within the health deadline.

        Raises:
            BackingStoreUnavailable: With a description of the failure.
        """
        try:
            await asyncio.wait_for(self.queue_store.ping(), timeout=self.health_timeout)
        except TimeoutError as e:
            raise BackingStoreUnavailable(
                f"ping timed out after {self.health_timeout}s"
            ) from e
