"""
Prometheus metrics collection.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    start_http_server,
)

from msgrelay.constants import (
    METRIC_API_LATENCY,
    METRIC_API_REQUESTS,
    METRIC_APPEND_FAILURES,
    METRIC_DEQUEUE_ERRORS,
    METRIC_ENQUEUE_FAILURES,
    METRIC_MESSAGES_DEQUEUED,
    METRIC_MESSAGES_ENQUEUED,
    METRIC_MESSAGES_PROCESSED,
    METRIC_PROCESSING_DURATION,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the message relay.

    Collects metrics for:
    - Enqueue successes and failures
    - Dequeues, processed records, and append failures per worker
    - Dequeue transport errors
    - Processing duration
    - API requests

    Lost messages are never observed directly; ``messages_dequeued_total``
    minus ``messages_processed_total`` bounds what a worker dropped.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.messages_enqueued = Counter(
            METRIC_MESSAGES_ENQUEUED,
            "Total number of messages accepted onto the queue",
            ["queue"],
            registry=self._registry,
        )

        self.enqueue_failures = Counter(
            METRIC_ENQUEUE_FAILURES,
            "Total number of rejected submissions",
            ["queue", "reason"],
            registry=self._registry,
        )

        self.messages_dequeued = Counter(
            METRIC_MESSAGES_DEQUEUED,
            "Total number of messages popped from the queue",
            ["worker_id"],
            registry=self._registry,
        )

        self.messages_processed = Counter(
            METRIC_MESSAGES_PROCESSED,
            "Total number of records appended to the result sink",
            ["worker_id"],
            registry=self._registry,
        )

        self.append_failures = Counter(
            METRIC_APPEND_FAILURES,
            "Total number of records that could not be appended (lost)",
            ["worker_id"],
            registry=self._registry,
        )

        self.dequeue_errors = Counter(
            METRIC_DEQUEUE_ERRORS,
            "Total number of dequeue transport errors",
            ["worker_id"],
            registry=self._registry,
        )

        self.processing_duration = Histogram(
            METRIC_PROCESSING_DURATION,
            "Time from pop to record append in seconds",
            ["worker_id"],
            buckets=(0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self._registry,
        )

        self.api_requests = Counter(
            METRIC_API_REQUESTS,
            "Total number of API requests",
            ["method", "endpoint", "status"],
            registry=self._registry,
        )

        self.api_latency = Histogram(
            METRIC_API_LATENCY,
            "API request latency in seconds",
            ["method", "endpoint"],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )

    def record_enqueued(self, queue: str) -> None:
        """Record an accepted submission."""
        self.messages_enqueued.labels(queue=queue).inc()

    def record_enqueue_failure(self, queue: str, reason: str) -> None:
        """Record a rejected submission."""
        self.enqueue_failures.labels(queue=queue, reason=reason).inc()

    def record_dequeued(self, worker_id: str) -> None:
        self.messages_dequeued.labels(worker_id=worker_id).inc()

    def record_processed(self, worker_id: str, duration_seconds: float) -> None:
        """Record a message whose record reached the sink."""
        self.messages_processed.labels(worker_id=worker_id).inc()
        self.processing_duration.labels(worker_id=worker_id).observe(duration_seconds)

    def record_append_failure(self, worker_id: str) -> None:
        self.append_failures.labels(worker_id=worker_id).inc()

    def record_dequeue_error(self, worker_id: str) -> None:
        self.dequeue_errors.labels(worker_id=worker_id).inc()

    def record_api_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration_seconds: float,
    ) -> None:
        """Record an API request."""
        self.api_requests.labels(
            method=method,
            endpoint=endpoint,
            status=str(status),
        ).inc()
        self.api_latency.labels(method=method, endpoint=endpoint).observe(
            duration_seconds
        )

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return CONTENT_TYPE_LATEST


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics


def serve_metrics(port: int) -> None:
    """
    Expose the default registry over HTTP for processes without an API.

    Args:
        port: Port to listen on. Zero disables the exporter.
    """
    if port > 0:
        start_http_server(port)
