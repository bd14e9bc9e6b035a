"""
Job CRUD operations.

Provides the tenant-scoped job store: enqueue, lookup, listing, the atomic
dequeue claim used by the dispatcher, and status transitions. Every
mutation appends a mirror outbox event in the same transaction.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Job persistence and queue claim semantics
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.base import utcnow
from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.sync_event_crud import sync_event_crud
from backend.boundary.db.CRUD.tenant_crud import tenant_crud
from backend.boundary.db.models import FailureKind, JobModel, JobStatus

# Candidates examined per dequeue call before giving up on lost races
MAX_CLAIM_SCAN = 32


class JobCRUD(BaseCRUD[JobModel]):
    """
    CRUD operations for JobModel.

    Extends BaseCRUD with the queue semantics: priority-ordered dequeue
    with a compare-and-set claim, terminal-state bookkeeping, and a guard
    that keeps canceled jobs canceled.
    """

    def __init__(self) -> None:
        """Initialize JobCRUD with JobModel."""
        super().__init__(JobModel)

    async def create(
        self,
        session: AsyncSession,
        tenant_id: str,
        kind: str,
        metadata: dict | None,
        priority: int = 100,
        scheduled_at: datetime | None = None,
        max_attempts: int = 3,
    ) -> JobModel:
        """
        Enqueue a new job, registering its tenant with the dispatcher on first use.

        Args:
            session: Async database session
            tenant_id: Owning tenant (must be non-empty)
            kind: Job kind tag
            metadata: Kind-specific payload
            priority: Higher values are dequeued first
            scheduled_at: Earliest eligible instant (defaults to now)
            max_attempts: Attempt ceiling

        Returns:
            JobModel in QUEUED state with attempts 0

        Raises:
            ValueError: If tenant_id is empty
        """
        if not tenant_id:
            raise ValueError("tenant_id is required")

        await tenant_crud.ensure(session, tenant_id)
        job = await super().create(
            session,
            tenant_id=tenant_id,
            kind=kind,
            job_metadata=metadata or {},
            status=JobStatus.QUEUED,
            priority=priority,
            scheduled_at=scheduled_at or utcnow(),
            attempts=0,
            max_attempts=max_attempts,
        )
        await sync_event_crud.record_job(session, job)
        return job

    async def list_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: str,
        status: JobStatus | None = None,
        limit: int | None = None,
    ) -> Sequence[JobModel]:
        """
        List a tenant's jobs, newest scheduled_at first.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            status: Optional status filter
            limit: Maximum number of jobs to return

        Returns:
            Sequence of JobModels
        """
        stmt = select(JobModel).where(JobModel.tenant_id == tenant_id)
        if status is not None:
            stmt = stmt.where(JobModel.status == status)
        stmt = stmt.order_by(JobModel.scheduled_at.desc(), JobModel.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def dequeue(
        self,
        session: AsyncSession,
        tenant_id: str,
        now: datetime | None = None,
        enforce_max_attempts: bool = True,
    ) -> JobModel | None:
        """
        Claim the next eligible job of a tenant.

        Eligible means QUEUED with scheduled_at <= now. Candidates are taken
        by priority descending, then scheduled_at ascending. Each claim is a
        conditional UPDATE on (id, tenant_id, status=QUEUED), so a job
        claimed concurrently by another dispatcher is skipped rather than
        claimed twice.

        Args:
            session: Async database session
            tenant_id: Tenant partition to dequeue from
            now: Reference instant (defaults to current UTC time)
            enforce_max_attempts: Fail candidates whose attempts already
                reached max_attempts instead of claiming them

        Returns:
            The claimed JobModel (RUNNING, attempts incremented), or None
        """
        now = now or utcnow()
        candidates_stmt = (
            select(JobModel.id, JobModel.attempts, JobModel.max_attempts)
            .where(
                JobModel.tenant_id == tenant_id,
                JobModel.status == JobStatus.QUEUED,
                JobModel.scheduled_at <= now,
            )
            .order_by(
                JobModel.priority.desc(),
                JobModel.scheduled_at.asc(),
                JobModel.created_at.asc(),
            )
            .limit(MAX_CLAIM_SCAN)
        )
        candidates = (await session.execute(candidates_stmt)).all()

        for candidate in candidates:
            if enforce_max_attempts and candidate.attempts >= candidate.max_attempts:
                await self._mark_exhausted(session, tenant_id, candidate.id, now)
                continue

            claim_stmt = (
                update(JobModel)
                .where(
                    JobModel.id == candidate.id,
                    JobModel.tenant_id == tenant_id,
                    JobModel.status == JobStatus.QUEUED,
                )
                .values(
                    status=JobStatus.RUNNING,
                    started_at=now,
                    finished_at=None,
                    attempts=JobModel.attempts + 1,
                )
                .returning(JobModel)
                .execution_options(populate_existing=True)
            )
            job = (await session.execute(claim_stmt)).scalar_one_or_none()
            if job is None:
                # Claimed elsewhere between select and update
                continue

            await sync_event_crud.record_job(session, job)
            return job

        return None

    async def _mark_exhausted(
        self,
        session: AsyncSession,
        tenant_id: str,
        job_id: str,
        now: datetime,
    ) -> JobModel | None:
        stmt = (
            update(JobModel)
            .where(
                JobModel.id == job_id,
                JobModel.tenant_id == tenant_id,
                JobModel.status == JobStatus.QUEUED,
            )
            .values(
                status=JobStatus.FAILED,
                finished_at=now,
                error="Maximum attempts exhausted",
                failure_kind=FailureKind.EXHAUSTED,
            )
            .returning(JobModel)
            .execution_options(populate_existing=True)
        )
        job = (await session.execute(stmt)).scalar_one_or_none()
        if job is not None:
            await sync_event_crud.record_job(session, job)
        return job

    async def update_status(
        self,
        session: AsyncSession,
        tenant_id: str,
        job_id: str,
        status: JobStatus,
        error: str | None = None,
        failure_kind: FailureKind | None = None,
        *,
        guard_canceled: bool = False,
    ) -> JobModel | None:
        """
        Transition a job to a new status.

        Terminal statuses stamp finished_at. QUEUED (retry) clears
        finished_at, error and failure_kind and makes the job eligible
        immediately. Attempts are never touched here.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            job_id: Job id
            status: New status
            error: Failure message to store
            failure_kind: Failure classification to store
            guard_canceled: Leave the job untouched if it is CANCELED

        Returns:
            Updated JobModel, or None if the job is absent (or guarded)
        """
        now = utcnow()
        values: dict = {"status": status}
        if status.is_terminal:
            values["finished_at"] = now
        if status == JobStatus.QUEUED:
            values.update(finished_at=None, error=None, failure_kind=None, scheduled_at=now)
        if error is not None:
            values["error"] = error
        if failure_kind is not None:
            values["failure_kind"] = failure_kind

        stmt = update(JobModel).where(JobModel.tenant_id == tenant_id, JobModel.id == job_id)
        if guard_canceled:
            stmt = stmt.where(JobModel.status != JobStatus.CANCELED)
        stmt = stmt.values(**values).returning(JobModel).execution_options(populate_existing=True)

        job = (await session.execute(stmt)).scalar_one_or_none()
        if job is not None:
            await sync_event_crud.record_job(session, job)
        return job

    async def count_by_status(
        self,
        session: AsyncSession,
        tenant_id: str,
    ) -> dict[str, int]:
        """Job counts per status value for one tenant."""
        stmt = (
            select(JobModel.status, func.count())
            .where(JobModel.tenant_id == tenant_id)
            .group_by(JobModel.status)
        )
        result = await session.execute(stmt)
        return {status.value: count for status, count in result.all()}

    async def list_for_file(
        self,
        session: AsyncSession,
        tenant_id: str,
        file_id: str,
        kind: str | None = None,
    ) -> Sequence[JobModel]:
        """
        Jobs whose metadata references a file, oldest first.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            file_id: Referenced file id (file_id or fileId metadata key)
            kind: Optional kind filter

        Returns:
            Sequence of JobModels
        """
        stmt = select(JobModel).where(
            JobModel.tenant_id == tenant_id,
            or_(
                JobModel.job_metadata["file_id"].as_string() == file_id,
                JobModel.job_metadata["fileId"].as_string() == file_id,
            ),
        )
        if kind is not None:
            stmt = stmt.where(JobModel.kind == kind)
        stmt = stmt.order_by(JobModel.created_at.asc())
        result = await session.execute(stmt)
        return result.scalars().all()


job_crud = JobCRUD()
