"""
Health Check Endpoints

Health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from salesviz.config import get_settings
from salesviz.database.connection import check_database_health
from salesviz.serving.refresher import DashboardRefresher
from salesviz.serving.api.routes.dashboard import get_refresher

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    refresher: DashboardRefresher = Depends(get_refresher),
) -> HealthResponse:
    """
    Health check.

    Checks:
    - Database connectivity
    - Dashboard freshness (a failed last refresh means the view is stale)
    """
    settings = get_settings()
    checks: Dict[str, Any] = {}
    overall_status = "healthy"

    db_health = await check_database_health()
    checks["database"] = db_health
    if db_health.get("status") != "healthy":
        overall_status = "degraded"

    refreshed_at: Optional[datetime] = refresher.refreshed_at
    checks["dashboard"] = {
        "status": "stale" if refresher.last_error else "fresh",
        "refreshed_at": refreshed_at.isoformat() if refreshed_at else None,
        "error": refresher.last_error,
    }
    if refresher.last_error and overall_status == "healthy":
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
    """Returns 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Returns 200 once the data store is reachable."""
    db_health = await check_database_health()
    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
