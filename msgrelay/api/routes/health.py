"""
Health check routes.
"""

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse, Response

from msgrelay.api.deps import IngestionServiceDep
from msgrelay.exceptions import BackingStoreUnavailable
from msgrelay.observability.metrics import get_metrics

router = APIRouter(tags=["Health"])


@router.get(
    "/healthz",
    response_class=PlainTextResponse,
    summary="Liveness check",
    description="Ping the queue store within a short deadline.",
)
async def healthz(service: IngestionServiceDep) -> PlainTextResponse:
    """
    Liveness probe endpoint.

    Returns:
        "ok" with 200, or the probe error with 503.
    """
    try:
        await service.check_health()
    except BackingStoreUnavailable as e:
        return PlainTextResponse(
            f"redis ping failed: {e}",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return PlainTextResponse("ok")


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics.",
)
async def metrics() -> Response:
    """
    Expose Prometheus metrics.

    Returns:
        Prometheus-formatted metrics.
    """
    metrics_collector = get_metrics()
    return Response(
        content=metrics_collector.get_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
