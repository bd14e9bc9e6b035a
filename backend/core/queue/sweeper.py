"""
Stuck file sweeper.

A file whose analysis job failed stays EXTRACTED. The sweeper finds files
that have been EXTRACTED for too long with no analysis job pending and
either queues another ai_analyze job or, once the file has used up its
analysis budget, marks it FAILED. A file whose latest analysis job was
canceled is left alone.

Dependencies: sqlalchemy, backend.boundary.db
System role: Recovery of files stalled between pipeline stages
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.base import utcnow
from backend.boundary.db.connection import get_session
from backend.boundary.db.CRUD import file_crud, job_crud
from backend.boundary.db.models import FileModel, FileStatus, JobKind, JobStatus
from backend.core.queue.loop import PollingLoop
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

PENDING_STATUSES = (JobStatus.QUEUED, JobStatus.RUNNING)


class StuckFileSweeper(PollingLoop):
    """Re-enqueue or fail files stuck in EXTRACTED."""

    name = "sweeper"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float = 60.0,
        stuck_after_seconds: float = 600.0,
        max_analysis_jobs: int = 3,
        priority: int = 100,
        max_attempts: int = 3,
    ) -> None:
        super().__init__(interval_seconds)
        self.session_factory = session_factory
        self.stuck_after_seconds = stuck_after_seconds
        self.max_analysis_jobs = max_analysis_jobs
        self.priority = priority
        self.max_attempts = max_attempts

    async def tick(self) -> int:
        """
        Sweep stuck files once.

        Returns:
            int: Number of files re-enqueued or failed
        """
        cutoff = utcnow() - timedelta(seconds=self.stuck_after_seconds)
        async with get_session(self.session_factory, read_only=True) as session:
            stuck = await file_crud.list_stuck_extracted(session, cutoff)
            candidates = [(file.tenant_id, file.id) for file in stuck]

        handled = 0
        for tenant_id, file_id in candidates:
            try:
                if await self.sweep_file(tenant_id, file_id):
                    handled += 1
            except Exception as e:
                log_exception_with_context(
                    logger,
                    "Sweeper failed for file",
                    e,
                    tenant_id=tenant_id,
                    file_id=file_id,
                )
        return handled

    async def sweep_file(self, tenant_id: str, file_id: str) -> bool:
        """
        Recover one stuck file.

        Returns:
            bool: True if a job was queued or the file was failed
        """
        async with get_session(self.session_factory) as session:
            file = await file_crud.get_for_tenant(session, tenant_id, file_id)
            if file is None or file.status != FileStatus.EXTRACTED:
                return False

            jobs = await job_crud.list_for_file(
                session, tenant_id, file_id, kind=JobKind.AI_ANALYZE.value
            )
            if any(job.status in PENDING_STATUSES for job in jobs):
                return False
            if jobs and jobs[-1].status == JobStatus.CANCELED:
                # The user stopped analysis; leave the file as it is
                return False

            if len(jobs) >= self.max_analysis_jobs:
                await self._fail_file(session, file, len(jobs))
                return True

            job = await job_crud.create(
                session,
                tenant_id=tenant_id,
                kind=JobKind.AI_ANALYZE.value,
                metadata={"file_id": file_id},
                priority=self.priority,
                max_attempts=self.max_attempts,
            )
            logger.info(
                "Re-enqueued analysis for stuck file",
                extra={"tenant_id": tenant_id, "file_id": file_id, "job_id": job.id},
            )
            return True

    async def _fail_file(self, session: AsyncSession, file: FileModel, job_count: int) -> None:
        await file_crud.update_status(session, file.tenant_id, file.id, FileStatus.FAILED)
        logger.warning(
            "Analysis budget exhausted, file marked failed",
            extra={"tenant_id": file.tenant_id, "file_id": file.id, "analysis_jobs": job_count},
        )
