"""
Job service orchestrator.

Coordinates tenant-facing job operations: enqueue, lookup, listing, run
history, retry and cancel. Wraps JobCRUD and JobRunCRUD.

Dependencies: backend.boundary.db.CRUD, backend.boundary.db.models
System role: Job management orchestration
"""

from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import job_crud, job_run_crud
from backend.boundary.db.models import JobModel, JobRunModel, JobStatus
from backend.configs import QueueSettings
from backend.core.exceptions import (
    InvalidJobTransitionError,
    JobNotFoundError,
    JobRetryExhaustedError,
    ValidationError,
)

RETRYABLE_STATUSES = (JobStatus.FAILED, JobStatus.CANCELED)
CANCELABLE_STATUSES = (JobStatus.QUEUED, JobStatus.RUNNING)


class JobService:
    """
    Job service orchestrator.

    Every operation is scoped to one tenant; a job owned by another tenant
    is reported as not found.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: QueueSettings,
        known_kinds: Iterable[str] | None = None,
    ) -> None:
        """
        Initialize job service.

        Args:
            db: AsyncSession for database operations
            settings: Queue defaults (priority, max attempts, enforcement)
            known_kinds: Kinds accepted by create_job (None accepts any)
        """
        self.db = db
        self.settings = settings
        self.known_kinds = set(known_kinds) if known_kinds is not None else None

    async def create_job(
        self,
        tenant_id: str,
        kind: str,
        metadata: dict | None = None,
        priority: int | None = None,
        scheduled_at: datetime | None = None,
        max_attempts: int | None = None,
    ) -> JobModel:
        """
        Enqueue a job.

        Raises:
            ValidationError: If the kind has no registered handler or the
                attempt ceiling is below one
        """
        if self.known_kinds is not None and kind not in self.known_kinds:
            raise ValidationError(f"Unknown job kind: {kind}", field="kind")
        if max_attempts is not None and max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1", field="max_attempts")

        job = await job_crud.create(
            self.db,
            tenant_id=tenant_id,
            kind=kind,
            metadata=metadata,
            priority=priority if priority is not None else self.settings.default_priority,
            scheduled_at=scheduled_at,
            max_attempts=(
                max_attempts if max_attempts is not None else self.settings.default_max_attempts
            ),
        )
        await self.db.commit()
        return job

    async def get_job(self, tenant_id: str, job_id: str) -> JobModel:
        """
        Get job by ID.

        Raises:
            JobNotFoundError: If the tenant has no such job
        """
        job = await job_crud.get_for_tenant(self.db, tenant_id, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def list_jobs(
        self,
        tenant_id: str,
        status: JobStatus | None = None,
    ) -> Sequence[JobModel]:
        return await job_crud.list_for_tenant(self.db, tenant_id, status=status)

    async def list_runs(self, tenant_id: str, job_id: str) -> Sequence[JobRunModel]:
        """Run history of a job, oldest first."""
        await self.get_job(tenant_id, job_id)
        return await job_run_crud.list_for_job(self.db, tenant_id, job_id)

    async def retry_job(self, tenant_id: str, job_id: str) -> JobModel:
        """
        Move a failed or canceled job back to queued.

        Attempts are kept; the next dequeue counts a new attempt.

        Raises:
            JobNotFoundError: If the tenant has no such job
            InvalidJobTransitionError: If the job is not failed or canceled
            JobRetryExhaustedError: If the attempt ceiling is enforced and reached
        """
        job = await self.get_job(tenant_id, job_id)
        if job.status not in RETRYABLE_STATUSES:
            raise InvalidJobTransitionError(job_id, job.status.value, JobStatus.QUEUED.value)
        if self.settings.enforce_max_attempts and job.attempts >= job.max_attempts:
            raise JobRetryExhaustedError(job_id, job.attempts, job.max_attempts)

        updated = await job_crud.update_status(self.db, tenant_id, job_id, JobStatus.QUEUED)
        if updated is None:
            raise JobNotFoundError(job_id)
        await self.db.commit()
        return updated

    async def cancel_job(self, tenant_id: str, job_id: str) -> JobModel:
        """
        Cancel a queued or running job.

        A running handler is not interrupted; the worker leaves the job
        canceled when the handler returns.

        Raises:
            JobNotFoundError: If the tenant has no such job
            InvalidJobTransitionError: If the job already finished
        """
        job = await self.get_job(tenant_id, job_id)
        if job.status not in CANCELABLE_STATUSES:
            raise InvalidJobTransitionError(job_id, job.status.value, JobStatus.CANCELED.value)

        updated = await job_crud.update_status(
            self.db,
            tenant_id,
            job_id,
            JobStatus.CANCELED,
            error="Canceled by request",
        )
        if updated is None:
            raise JobNotFoundError(job_id)
        await self.db.commit()
        return updated
