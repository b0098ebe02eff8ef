"""
Worker process for consuming messages.

The worker pops messages from the queue one at a time, processes them, and
appends the result to the sink. Pop is destructive and there is no
acknowledgment: if the process dies after a pop and before the append
completes, that message is gone for good. Running several worker processes
against one queue is safe; Redis hands each message to exactly one of them.
"""

import asyncio
import logging
import signal
import sys
import time

from msgrelay.config import get_settings
from msgrelay.constants import (
    DEFAULT_DEQUEUE_BACKOFF_SECONDS,
    DEFAULT_POP_TIMEOUT_SECONDS,
    SPAN_APPEND_RECORD,
    SPAN_DEQUEUE_MESSAGE,
    SPAN_PROCESS_MESSAGE,
    WorkerState,
)
from msgrelay.exceptions import BackingStoreUnavailable, ResultSinkError
from msgrelay.observability.logging import bind_context, setup_logging
from msgrelay.observability.metrics import get_metrics, serve_metrics
from msgrelay.observability.tracing import get_tracer, setup_tracing
from msgrelay.queue.connection import create_queue_store
from msgrelay.queue.store import QueueStore
from msgrelay.sink.file import FileResultSink, ResultSink
from msgrelay.types.message import WorkerStats
from msgrelay.worker.processing import process_message

logger = logging.getLogger(__name__)


class Worker:
    """
    Sequential consumer loop over a single queue.

    Features:
    - Bounded blocking pop so stop requests are noticed at least every
      ``pop_timeout`` seconds
    - Fixed backoff on transport errors, retried forever
    - Append failures are logged and dropped, never retried
    - Cooperative shutdown: no new pop after ``stop()``
    """

    def __init__(
        self,
        queue_store: QueueStore,
        result_sink: ResultSink,
        queue_name: str,
        worker_id: str = "worker",
        pop_timeout: float = DEFAULT_POP_TIMEOUT_SECONDS,
        dequeue_backoff: float = DEFAULT_DEQUEUE_BACKOFF_SECONDS,
        processing_delay: float = 0.0,
    ):
        """
        Initialize the worker.

        Args:
            queue_store: Queue to pop from.
            result_sink: Where processed records are appended.
            queue_name: Name of the queue.
            worker_id: Identifier used in logs and metrics.
            pop_timeout: Seconds each blocking pop may wait.
            dequeue_backoff: Seconds to wait after a failed pop.
            processing_delay: Artificial delay per message, in seconds.
        """
        self.queue_store = queue_store
        self.result_sink = result_sink
        self.queue_name = queue_name
        self.worker_id = worker_id
        self.pop_timeout = pop_timeout
        self.dequeue_backoff = dequeue_backoff
        self.processing_delay = processing_delay

        self.stats = WorkerStats()
        self._state = WorkerState.IDLE
        self._stop_event = asyncio.Event()
        self._metrics = get_metrics()

    @property
    def state(self) -> WorkerState:
        return self._state

    def stop(self) -> None:
        """
        Request shutdown.

        Takes effect at the next polling boundary; a pop already waiting
        is allowed to finish.
        """
        if not self._stop_event.is_set():
            logger.info("Worker stopping", extra={"worker_id": self.worker_id})
        self._stop_event.set()

    async def run(self) -> WorkerStats:
        """
        Run the consumer loop until stopped.

        Returns:
            Counters for this run.
        """
        logger.info(
            "Worker starting",
            extra={
                "worker_id": self.worker_id,
                "queue": self.queue_name,
                "pop_timeout": self.pop_timeout,
                "processing_delay": self.processing_delay,
            },
        )

        while not self._stop_event.is_set():
            self._state = WorkerState.POLLING

            try:
                payload = await self._pop()
            except BackingStoreUnavailable as e:
                self.stats.dequeue_errors += 1
                self._metrics.record_dequeue_error(self.worker_id)
                logger.error(
                    "Dequeue error",
                    extra={"worker_id": self.worker_id, "error": str(e)},
                )
                self._state = WorkerState.BACKOFF
                await self._sleep_unless_stopped(self.dequeue_backoff)
                continue

            if payload is None:
                self.stats.timeouts += 1
                continue

            try:
                await self._handle_message(payload)
            except Exception as e:
                logger.exception(
                    f"Error handling message: {e}",
                    extra={"worker_id": self.worker_id},
                )

        self._state = WorkerState.DRAINING
        logger.info(
            "Worker stopped",
            extra={
                "worker_id": self.worker_id,
                "dequeued": self.stats.dequeued,
                "processed": self.stats.processed,
                "append_failures": self.stats.append_failures,
                "dequeue_errors": self.stats.dequeue_errors,
            },
        )
        self._state = WorkerState.TERMINATED
        return self.stats

    async def _pop(self) -> str | None:
        with get_tracer().start_as_current_span(SPAN_DEQUEUE_MESSAGE) as span:
            span.set_attribute("queue", self.queue_name)
            span.set_attribute("worker_id", self.worker_id)
            return await self.queue_store.blocking_pop(self.queue_name, self.pop_timeout)

    async def _handle_message(self, payload: str) -> None:
        """
        Process one popped message and append its record.

        From here until the append returns, the message lives only in this
        coroutine.
        """
        start_time = time.monotonic()

        self.stats.dequeued += 1
        self._metrics.record_dequeued(self.worker_id)
        logger.info(
            "Dequeued message",
            extra={"worker_id": self.worker_id, "payload": payload},
        )

        self._state = WorkerState.PROCESSING
        with get_tracer().start_as_current_span(SPAN_PROCESS_MESSAGE) as span:
            span.set_attribute("worker_id", self.worker_id)
            record = await process_message(payload, self.processing_delay)

        logger.info(
            "Processed message",
            extra={"worker_id": self.worker_id, "payload": payload},
        )

        self._state = WorkerState.APPENDING
        with get_tracer().start_as_current_span(SPAN_APPEND_RECORD):
            try:
                await self.result_sink.append(record.to_line())
            except ResultSinkError as e:
                # Not retried: the message is already off the queue.
                self.stats.append_failures += 1
                self._metrics.record_append_failure(self.worker_id)
                logger.error(
                    "Write output error",
                    extra={
                        "worker_id": self.worker_id,
                        "payload": payload,
                        "error": str(e),
                    },
                )
                return

        self.stats.processed += 1
        self._metrics.record_processed(self.worker_id, time.monotonic() - start_time)

    async def _sleep_unless_stopped(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except TimeoutError:
            pass


async def run_async() -> None:
    """Run the worker asynchronously."""
    settings = get_settings()
    worker_id = settings.resolved_worker_id

    setup_logging(component="worker")
    bind_context(worker_id=worker_id)
    setup_tracing()
    serve_metrics(settings.worker_metrics_port)

    result_sink = FileResultSink(settings.output_path)
    try:
        result_sink.prepare()
    except ResultSinkError as e:
        logger.critical(f"Cannot prepare result sink: {e}")
        sys.exit(1)

    queue_store = create_queue_store(settings)

    worker = Worker(
        queue_store=queue_store,
        result_sink=result_sink,
        queue_name=settings.queue_name,
        worker_id=worker_id,
        pop_timeout=settings.pop_timeout_seconds,
        dequeue_backoff=settings.dequeue_backoff_seconds,
        processing_delay=settings.processing_delay_seconds,
    )

    # Handle shutdown signals
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, worker.stop)

    logger.info(
        "Worker configured",
        extra={
            "redis_addr": settings.redis_addr,
            "queue": settings.queue_name,
            "output_path": settings.output_path,
            "processing_delay_ms": settings.processing_delay_ms,
        },
    )

    try:
        await worker.run()
    finally:
        await queue_store.close()
        logger.info("Shutdown complete")


def run() -> None:
    """Run the worker."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
