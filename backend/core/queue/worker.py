"""
Job run worker.

Claims a bounded batch of queued job runs across all tenants and executes
them one at a time through the handler registered for each job's kind.

Dependencies: sqlalchemy, backend.boundary.db, backend.core.queue
System role: Job execution and failure bookkeeping
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.connection import get_session
from backend.boundary.db.CRUD import job_crud, job_run_crud
from backend.boundary.db.models import FailureKind, JobRunStatus, JobStatus
from backend.core.queue.exceptions import (
    JobCanceledError,
    JobNotFoundForRunError,
    JobProcessingError,
)
from backend.core.queue.loop import PollingLoop
from backend.core.queue.registry import HandlerRegistry, StageHandler
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimedRun:
    """Identifiers of a run claimed by this worker."""

    run_id: str
    tenant_id: str
    job_id: str


class Worker(PollingLoop):
    """
    Sequential job run executor.

    For each claimed run the handler executes inside one transaction
    together with the success bookkeeping, so a failing handler leaves no
    partial writes behind. Failures are then recorded in a fresh
    transaction. A canceled job is never moved to succeeded or failed, and
    a cancel that lands while the handler runs rolls the handler's writes
    back.
    """

    name = "worker"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: HandlerRegistry,
        batch_size: int = 5,
        interval_seconds: float = 5.0,
        handler_timeout_seconds: float = 120.0,
    ) -> None:
        super().__init__(interval_seconds)
        self.session_factory = session_factory
        self.registry = registry
        self.batch_size = batch_size
        self.handler_timeout_seconds = handler_timeout_seconds

    async def tick(self) -> int:
        """
        Claim and process one batch.

        Returns:
            int: Number of runs processed
        """
        async with get_session(self.session_factory) as session:
            runs = await job_run_crud.claim_queued(session, self.batch_size)
            claimed = [ClaimedRun(run.id, run.tenant_id, run.job_id) for run in runs]

        for run in claimed:
            try:
                await self.process_run(run)
            except Exception as e:
                log_exception_with_context(
                    logger,
                    "Worker could not record run outcome",
                    e,
                    run_id=run.run_id,
                    job_id=run.job_id,
                )
        return len(claimed)

    async def process_run(self, run: ClaimedRun) -> bool:
        """
        Execute one claimed run.

        Args:
            run: Claimed run identifiers

        Returns:
            bool: True if the handler succeeded
        """
        handler: StageHandler | None = None
        metadata: BaseModel | None = None

        try:
            async with get_session(self.session_factory) as session:
                job = await job_crud.get_for_tenant(session, run.tenant_id, run.job_id)
                if job is None:
                    raise JobNotFoundForRunError(run.job_id)
                if job.status == JobStatus.CANCELED:
                    raise JobCanceledError(run.job_id)

                handler = self.registry.get(job.kind, job_id=job.id)
                metadata = self.registry.parse_metadata(handler, job.job_metadata, job_id=job.id)

                async with asyncio.timeout(self.handler_timeout_seconds):
                    result = await handler.handle(session, job, metadata)

                await job_run_crud.update_status(
                    session,
                    run.tenant_id,
                    run.run_id,
                    JobRunStatus.SUCCEEDED,
                    result=result,
                )
                finished = await job_crud.update_status(
                    session,
                    run.tenant_id,
                    run.job_id,
                    JobStatus.SUCCEEDED,
                    guard_canceled=True,
                )
                if finished is None:
                    # Canceled while the handler ran; discard its writes
                    raise JobCanceledError(run.job_id)
        except Exception as e:
            await self._record_failure(run, handler, metadata, e)
            return False

        logger.info(
            "Job run succeeded",
            extra={"run_id": run.run_id, "job_id": run.job_id, "tenant_id": run.tenant_id},
        )
        return True

    def _classify(self, error: Exception) -> tuple[FailureKind, str]:
        if isinstance(error, JobProcessingError):
            return error.failure_kind, str(error)
        if isinstance(error, TimeoutError):
            return (
                FailureKind.TIMEOUT,
                f"Handler timed out after {self.handler_timeout_seconds:g}s",
            )
        return FailureKind.TRANSIENT, str(error) or type(error).__name__

    async def _record_failure(
        self,
        run: ClaimedRun,
        handler: StageHandler | None,
        metadata: Any,
        error: Exception,
    ) -> None:
        failure_kind, message = self._classify(error)
        logger.warning(
            f"Job run failed: {message}",
            extra={
                "run_id": run.run_id,
                "job_id": run.job_id,
                "tenant_id": run.tenant_id,
                "failure_kind": failure_kind.value,
            },
        )

        async with get_session(self.session_factory) as session:
            await job_run_crud.update_status(
                session,
                run.tenant_id,
                run.run_id,
                JobRunStatus.FAILED,
                error=message,
                failure_kind=failure_kind,
            )
            failed_job = await job_crud.update_status(
                session,
                run.tenant_id,
                run.job_id,
                JobStatus.FAILED,
                error=message,
                failure_kind=failure_kind,
                guard_canceled=True,
            )

        # A canceled job keeps its file state; only real failures run the hook
        if handler is None or metadata is None or failed_job is None:
            return

        try:
            async with get_session(self.session_factory) as session:
                await handler.on_failure(session, run.tenant_id, metadata, error)
        except Exception as hook_error:
            log_exception_with_context(
                logger,
                "Failure hook raised",
                hook_error,
                job_id=run.job_id,
                kind=handler.kind,
            )
