"""
Salesperson API Endpoints
"""

from fastapi import APIRouter, Depends
import structlog

from salesviz.serving.refresher import DashboardRefresher
from salesviz.serving.api.routes.dashboard import get_refresher
from salesviz.serving.api.schemas import PersonDetailResponse, person_detail_out

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/{name}", response_model=PersonDetailResponse)
async def get_salesperson(
    name: str,
    refresher: DashboardRefresher = Depends(get_refresher),
) -> PersonDetailResponse:
    """
    Detail view for one salesperson.

    Unknown names are not an error: the response carries zero totals and no
    reference data.
    """
    logger.info("get_salesperson called", name=name)
    detail = await refresher.load_person(name)
    return person_detail_out(detail)
