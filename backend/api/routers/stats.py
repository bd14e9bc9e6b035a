"""
Dashboard statistics endpoint.

Routes: GET /stats

Dependencies: backend.application.services.stats_service
System role: Stats HTTP API
"""

from fastapi import APIRouter, Depends

from backend.api.deps import get_stats_service, get_tenant_id
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.stats_service import StatsService
from backend.models.stats import StatsResponse

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
@handle_service_errors
async def get_stats(
    tenant_id: str = Depends(get_tenant_id),
    stats_service: StatsService = Depends(get_stats_service),
) -> StatsResponse:
    """Totals of files, jobs and entries plus jobs per status."""
    return await stats_service.get_stats(tenant_id)
