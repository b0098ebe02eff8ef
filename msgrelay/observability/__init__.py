"""
Observability module.
Contains logging, metrics, and tracing setup.
"""

from msgrelay.observability.logging import bind_context, setup_logging
from msgrelay.observability.metrics import (
    MetricsCollector,
    get_metrics,
    serve_metrics,
    setup_metrics,
)
from msgrelay.observability.tracing import get_tracer, setup_tracing

__all__ = [
    "setup_logging",
    "bind_context",
    "setup_metrics",
    "get_metrics",
    "serve_metrics",
    "MetricsCollector",
    "setup_tracing",
    "get_tracer",
]
