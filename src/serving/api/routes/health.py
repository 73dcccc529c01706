"""
Health Check Endpoints

Reports whether the dashboard can reach the backend it depends on.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Response
from pydantic import BaseModel

from src.config import get_settings
from src.database.connection import check_database_health
from src.serving.cache import get_redis
from src.storage import get_storage

settings = get_settings()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Dependency health.

    The database is required; redis (last-known analytics) and the storage
    client only degrade the service when missing.
    """
    checks: Dict[str, Any] = {"database": await check_database_health()}
    overall_status = "healthy" if checks["database"]["status"] == "healthy" else "unhealthy"

    try:
        await get_redis().ping()
        checks["redis"] = {"status": "healthy"}
    except Exception as e:
        checks["redis"] = {"status": "unhealthy", "error": str(e)}

    try:
        checks["storage"] = {"status": "healthy", "bucket": get_storage().bucket}
    except RuntimeError as e:
        checks["storage"] = {"status": "unhealthy", "error": str(e)}

    if overall_status == "healthy" and any(
        check["status"] != "healthy" for check in checks.values()
    ):
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Ready once the database answers."""
    db_health = await check_database_health()
    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
