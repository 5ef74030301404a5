"""Health check endpoints."""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

from songvault.api.deps import SettingsDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness check response with component status."""

    ready: bool
    checks: dict[str, bool]
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Basic health check - always returns OK if the service is running."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment.value,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request, settings: SettingsDep) -> ReadinessResponse:
    """Kubernetes readiness probe - checks all dependencies."""
    checks: dict[str, bool] = {}

    checks["app"] = getattr(request.app.state, "ready", False)

    metadata_store = getattr(request.app.state, "metadata_store", None)
    checks["metadata_store"] = metadata_store is not None and await metadata_store.ping()

    checks["object_store"] = getattr(request.app.state, "object_store", None) is not None
    if settings.storage_backend == "local":
        checks["object_store"] = checks["object_store"] and settings.storage_path.exists()

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/info")
async def info(settings: SettingsDep) -> dict[str, Any]:
    """Application information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment.value,
        "features": {
            "storage_backend": settings.storage_backend,
            "audio_bucket": settings.audio_bucket,
            "image_bucket": settings.image_bucket,
            "blob_delete_policy": settings.blob_delete_policy.value,
            "normalize_category_on_write": settings.normalize_category_on_write,
        },
    }
