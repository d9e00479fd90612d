"""
Dashboard API Endpoints

Serves the current dashboard view. Reads never touch the data store; the
view is rebuilt by the refresher on change notifications or on demand.
"""

from fastapi import APIRouter, Depends, Query, Request
import structlog

from salesviz.aggregation import Granularity
from salesviz.serving.refresher import DashboardRefresher
from salesviz.serving.api.schemas import (
    DashboardResponse,
    SeriesResponse,
    dashboard_out,
    series_out,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


def get_refresher(request: Request) -> DashboardRefresher:
    """Dependency returning the application's dashboard refresher"""
    return request.app.state.refresher


def _dashboard_response(refresher: DashboardRefresher) -> DashboardResponse:
    return dashboard_out(
        refresher.view,
        refreshed_at=refresher.refreshed_at,
        stale=refresher.last_error is not None,
    )


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    refresher: DashboardRefresher = Depends(get_refresher),
) -> DashboardResponse:
    """
    Full dashboard: KPIs, period series, categories, salesperson cards and
    the most recent transactions.
    """
    return _dashboard_response(refresher)


@router.get("/series", response_model=SeriesResponse)
async def get_series(
    granularity: Granularity = Query(Granularity.DAY),
    refresher: DashboardRefresher = Depends(get_refresher),
) -> SeriesResponse:
    """Cumulative and stacked-category series for one granularity."""
    return series_out(refresher.view, granularity)


@router.post("/refresh", response_model=DashboardResponse)
async def refresh_dashboard(
    refresher: DashboardRefresher = Depends(get_refresher),
) -> DashboardResponse:
    """Refetch every record and recompute the dashboard."""
    logger.info("Manual dashboard refresh requested")
    await refresher.refresh()
    return _dashboard_response(refresher)
