"""
API routes module.
"""

from msgrelay.api.routes.enqueue import router as enqueue_router
from msgrelay.api.routes.health import router as health_router

__all__ = ["enqueue_router", "health_router"]
