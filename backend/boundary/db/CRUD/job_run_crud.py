"""
Job run CRUD operations.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Per-attempt execution history persistence
"""

from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.base import utcnow
from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models import FailureKind, JobRunModel, JobRunStatus


class JobRunCRUD(BaseCRUD[JobRunModel]):
    """
    CRUD operations for JobRunModel.

    Runs are created QUEUED by the dispatcher and claimed by workers through
    a conditional QUEUED -> RUNNING update.
    """

    def __init__(self) -> None:
        super().__init__(JobRunModel)

    async def create_for_job(
        self,
        session: AsyncSession,
        job_id: str,
        tenant_id: str,
    ) -> JobRunModel:
        """
        Create a queued run for a claimed job.

        Args:
            session: Async database session
            job_id: Parent job
            tenant_id: Owning tenant (same as the job)

        Returns:
            JobRunModel in QUEUED state
        """
        return await super().create(
            session,
            job_id=job_id,
            tenant_id=tenant_id,
            status=JobRunStatus.QUEUED,
        )

    async def update_status(
        self,
        session: AsyncSession,
        tenant_id: str,
        run_id: str,
        status: JobRunStatus,
        result: dict | None = None,
        error: str | None = None,
        failure_kind: FailureKind | None = None,
    ) -> JobRunModel | None:
        """
        Transition a run to a new status.

        RUNNING stamps started_at; SUCCEEDED and FAILED stamp finished_at.

        Returns:
            Updated JobRunModel, None if absent
        """
        now = utcnow()
        values: dict = {"status": status}
        if status == JobRunStatus.RUNNING:
            values["started_at"] = now
        if status in (JobRunStatus.SUCCEEDED, JobRunStatus.FAILED):
            values["finished_at"] = now
        if result is not None:
            values["result"] = result
        if error is not None:
            values["error"] = error
        if failure_kind is not None:
            values["failure_kind"] = failure_kind

        return await self.update_for_tenant(session, tenant_id, run_id, **values)

    async def claim_queued(
        self,
        session: AsyncSession,
        limit: int,
    ) -> list[JobRunModel]:
        """
        Claim up to `limit` queued runs across all tenants, oldest first.

        Each run is moved QUEUED -> RUNNING with a conditional update; runs
        already claimed by another worker are skipped.

        Args:
            session: Async database session
            limit: Maximum number of runs to claim

        Returns:
            Claimed JobRunModels in creation order
        """
        stmt = (
            select(JobRunModel.id)
            .where(JobRunModel.status == JobRunStatus.QUEUED)
            .order_by(JobRunModel.created_at.asc())
            .limit(limit)
        )
        run_ids = (await session.execute(stmt)).scalars().all()

        claimed: list[JobRunModel] = []
        now = utcnow()
        for run_id in run_ids:
            claim_stmt = (
                update(JobRunModel)
                .where(JobRunModel.id == run_id, JobRunModel.status == JobRunStatus.QUEUED)
                .values(status=JobRunStatus.RUNNING, started_at=now)
                .returning(JobRunModel)
                .execution_options(populate_existing=True)
            )
            run = (await session.execute(claim_stmt)).scalar_one_or_none()
            if run is not None:
                claimed.append(run)
        return claimed

    async def list_for_job(
        self,
        session: AsyncSession,
        tenant_id: str,
        job_id: str,
    ) -> Sequence[JobRunModel]:
        """Run history of a job, oldest first."""
        stmt = (
            select(JobRunModel)
            .where(JobRunModel.tenant_id == tenant_id, JobRunModel.job_id == job_id)
            .order_by(JobRunModel.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


job_run_crud = JobRunCRUD()
