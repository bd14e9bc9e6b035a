"""
Knowledge-base API endpoints.

Routes: GET /kb?category=&q=

Dependencies: backend.application.services.kb_service, backend.models
System role: Knowledge base HTTP API
"""

from fastapi import APIRouter, Depends, Query

from backend.api.deps import get_kb_service, get_tenant_id
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.kb_service import KbService
from backend.boundary.db.models import KbCategory
from backend.models.kb import KbEntryResponse, KbListResponse

router = APIRouter(prefix="/kb", tags=["knowledge-base"])


@router.get("", response_model=KbListResponse)
@handle_service_errors
async def list_kb_entries(
    category: KbCategory | None = Query(default=None),
    q: str | None = Query(default=None, description="Search title and summary"),
    tenant_id: str = Depends(get_tenant_id),
    kb_service: KbService = Depends(get_kb_service),
) -> KbListResponse:
    """List or search the tenant's knowledge base, newest first."""
    entries = await kb_service.list_entries(tenant_id, category=category, query=q)
    return KbListResponse(
        entries=[KbEntryResponse.model_validate(entry) for entry in entries],
        total=len(entries),
    )
