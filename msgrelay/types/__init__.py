"""
Type definitions for the message relay.
Contains input/output type definitions, grouped by module.
"""

from msgrelay.types.api import (
    EnqueueRequest,
    EnqueueResponse,
    ErrorResponse,
)
from msgrelay.types.message import (
    ProcessedRecord,
    WorkerStats,
    format_timestamp_ns,
)

__all__ = [
    # API types
    "EnqueueRequest",
    "EnqueueResponse",
    "ErrorResponse",
    # Message types
    "ProcessedRecord",
    "WorkerStats",
    "format_timestamp_ns",
]
