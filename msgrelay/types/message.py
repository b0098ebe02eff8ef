"""
Message-related type definitions for internal use.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

from msgrelay.constants import RECORD_SEPARATOR


def format_timestamp_ns(timestamp_ns: int) -> str:
    """
    Format a Unix timestamp in nanoseconds as ISO-8601 UTC.

    ``datetime`` only carries microseconds, so the fractional part is
    rendered from the integer directly.

    Example:
        >>> format_timestamp_ns(1_700_000_000_123_456_789)
        '2023-11-14T22:13:20.123456789Z'
    """
    seconds, nanos = divmod(timestamp_ns, 1_000_000_000)
    base = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    return f"{base}.{nanos:09d}Z"


@dataclass(frozen=True)
class ProcessedRecord:
    """
    Evidence that a message was fully handled.
    Written once to the result sink and never mutated.
    """

    payload: str
    received_at_ns: int = field(default_factory=time.time_ns)

    @property
    def timestamp(self) -> str:
        return format_timestamp_ns(self.received_at_ns)

    def to_line(self) -> str:
        """Serialize as ``<timestamp> | <payload>``."""
        return f"{self.timestamp}{RECORD_SEPARATOR}{self.payload}"


@dataclass
class WorkerStats:
    """
    Counters accumulated by one worker run.
    ``dequeued - processed - append_failures`` is zero unless the run was
    interrupted mid-message.
    """

    dequeued: int = 0
    processed: int = 0
    append_failures: int = 0
    dequeue_errors: int = 0
    timeouts: int = 0

    @property
    def lost(self) -> int:
        """Messages popped by this run that never reached the sink."""
        return self.dequeued - self.processed
