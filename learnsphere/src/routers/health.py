"""
Health, readiness and metrics endpoints.

``router`` carries the API-prefixed health check used by the web client;
``monitoring_router`` carries the unprefixed probes for containers and the
Prometheus scrape endpoint.
"""

import structlog
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from learnsphere.src.config import Settings
from learnsphere.src.dependencies import get_settings_dependency

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])
monitoring_router = APIRouter()


async def check_storage(request: Request) -> str:
    """Ping MongoDB; the in-memory backend is always healthy."""
    client = getattr(request.app.state, "mongo_client", None)
    if client is None:
        return "healthy"

    try:
        await client.admin.command("ping")
        return "healthy"
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return "unhealthy"


@router.get("/health", summary="API Health")
async def api_health() -> Dict[str, Any]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@monitoring_router.get("/health", tags=["Health"])
async def health_check(settings: Settings = Depends(get_settings_dependency)) -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    Use for container health checks.
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@monitoring_router.get("/ready", tags=["Health"])
async def readiness_check(
    request: Request,
    settings: Settings = Depends(get_settings_dependency)
) -> JSONResponse:
    """
    Readiness check endpoint.

    Returns 200 when storage answers a ping, 503 otherwise.
    """
    checks = {
        "storage": await check_storage(request),
    }

    all_healthy = all(value == "healthy" for value in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if all_healthy else "not_ready",
            "service": settings.app_name,
            "version": settings.app_version,
            "backend": settings.storage_backend,
            "checks": checks
        }
    )


@monitoring_router.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
