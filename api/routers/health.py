"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_settings
from backend.core.presets import load_presets
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health():
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator for health checks
    """
    return {"status": "ok"}


@router.get("/health/ready")
def readiness(settings: Settings = Depends(get_settings)):
    """
    Readiness endpoint: the preset catalog loads and settings are valid.

    Returns:
        dict: Status, environment and number of presets loaded
    """
    presets = load_presets()
    return {
        "status": "ok",
        "environment": settings.environment,
        "presets": len(presets),
    }
