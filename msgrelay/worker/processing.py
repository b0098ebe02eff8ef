"""
Message processing step.

Processing is deliberately trivial: wait for the configured delay, then
stamp the payload with the receipt time. The delay exists to widen the
window between pop and append so crash loss can be reproduced on demand.
"""

import asyncio
import logging

from msgrelay.types.message import ProcessedRecord

logger = logging.getLogger(__name__)


async def process_message(payload: str, delay_seconds: float = 0.0) -> ProcessedRecord:
    """
    Process a single popped message.

    Args:
        payload: The message text.
        delay_seconds: Artificial delay before the record is produced.

    Returns:
        The record to append to the result sink.
    """
    if delay_seconds > 0:
        await asyncio.sleep(delay_seconds)

    return ProcessedRecord(payload=payload)
