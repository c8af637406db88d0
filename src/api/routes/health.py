"""
Health check endpoints.

Provides endpoints for monitoring application health and status.
"""

from typing import Dict, Any
from fastapi import APIRouter

from config.settings import get_settings
from scoring.tables import CompatibilityTableError, get_compatibility_tables


router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        Health status with basic info
    """
    return {
        "status": "healthy",
        "service": "outfit-rating-api",
    }


@router.get("/health/detailed")
async def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks:
    - Configuration loaded
    - Compatibility tables loadable
    """
    settings = get_settings()

    tables_status: Dict[str, Any]
    try:
        tables = get_compatibility_tables()
        tables_status = {"status": "loaded", "version": tables.version}
    except CompatibilityTableError as e:
        tables_status = {"status": "error", "error": str(e)}

    return {
        "status": "healthy" if tables_status["status"] == "loaded" else "degraded",
        "service": "outfit-rating-api",
        "environment": settings.environment,
        "checks": {
            "config": "ok",
            "compatibility_tables": tables_status,
        },
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, str]:
    """
    Kubernetes-style readiness probe.

    Ready once the compatibility tables are loaded.
    """
    try:
        get_compatibility_tables()
    except CompatibilityTableError:
        return {"status": "not_ready", "reason": "compatibility_tables_invalid"}

    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes-style liveness probe.

    Returns 200 if the service is alive.
    """
    return {"status": "alive"}
