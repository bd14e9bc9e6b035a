"""
Dashboard statistics service.

Dependencies: backend.boundary.db.CRUD
System role: Per-tenant pipeline totals
"""

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import file_crud, job_crud, kb_entry_crud
from backend.boundary.db.models import FileStatus
from backend.models.stats import StatsResponse


class StatsService:
    """Aggregate counts for one tenant."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_stats(self, tenant_id: str) -> StatsResponse:
        jobs_by_status = await job_crud.count_by_status(self.db, tenant_id)
        files_by_status: dict[str, int] = {}
        for status in FileStatus:
            files_by_status[status.value] = await file_crud.count_for_tenant(self.db, tenant_id, status)
        return StatsResponse(
            total_files=sum(files_by_status.values()),
            total_jobs=sum(jobs_by_status.values()),
            total_kb_entries=await kb_entry_crud.count_for_tenant(self.db, tenant_id),
            jobs_by_status=jobs_by_status,
            files_by_status={status: count for status, count in files_by_status.items() if count},
        )
