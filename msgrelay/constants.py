"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class WorkerState(StrEnum):
    """
    Worker consumer loop states.

    State transitions:
    - POLLING -> POLLING (pop timed out)
    - POLLING -> BACKOFF -> POLLING (transport error)
    - POLLING -> PROCESSING -> APPENDING -> POLLING (message received)
    - POLLING -> DRAINING -> TERMINATED (stop observed)
    """

    IDLE = "idle"
    POLLING = "polling"
    BACKOFF = "backoff"
    PROCESSING = "processing"
    APPENDING = "appending"
    DRAINING = "draining"
    TERMINATED = "terminated"


# Default values
DEFAULT_QUEUE_NAME = "messages"
DEFAULT_POP_TIMEOUT_SECONDS = 5
DEFAULT_DEQUEUE_BACKOFF_SECONDS = 1.0
# Client-side allowance on top of the BRPOP wait before the reply counts as lost
DEFAULT_POP_GRACE_SECONDS = 10.0
DEFAULT_ENQUEUE_TIMEOUT_SECONDS = 5.0
DEFAULT_HEALTH_TIMEOUT_SECONDS = 2.0
DEFAULT_MAX_BODY_BYTES = 1 << 20

# API constants
JSON_CONTENT_TYPE = "application/json"
RECORD_SEPARATOR = " | "

# Metrics names
METRIC_MESSAGES_ENQUEUED = "messages_enqueued_total"
METRIC_ENQUEUE_FAILURES = "enqueue_failures_total"
METRIC_MESSAGES_DEQUEUED = "messages_dequeued_total"
METRIC_MESSAGES_PROCESSED = "messages_processed_total"
METRIC_APPEND_FAILURES = "append_failures_total"
METRIC_DEQUEUE_ERRORS = "dequeue_errors_total"
METRIC_PROCESSING_DURATION = "message_processing_seconds"
METRIC_API_REQUESTS = "api_requests_total"
METRIC_API_LATENCY = "api_request_latency_seconds"

# Trace span names
SPAN_ENQUEUE_MESSAGE = "enqueue_message"
SPAN_DEQUEUE_MESSAGE = "dequeue_message"
SPAN_PROCESS_MESSAGE = "process_message"
SPAN_APPEND_RECORD = "append_record"
