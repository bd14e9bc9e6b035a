"""
Job dispatcher.

On every tick, visits each registered tenant and converts at most one
eligible queued job into a queued job run. The tenant list is re-read from
the database each tick, so new tenants are picked up without a restart.

Dependencies: sqlalchemy, backend.boundary.db
System role: Fair per-tenant fan-out from jobs to job runs
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.connection import get_session
from backend.boundary.db.CRUD import job_crud, job_run_crud, tenant_crud
from backend.boundary.db.models import JobRunModel
from backend.core.queue.loop import PollingLoop
from backend.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class Dispatcher(PollingLoop):
    """
    Round-robin dispatcher over tenants.

    Each tenant is handled in its own transaction: the dequeue claim and the
    job run insert commit together or not at all. A failure for one tenant
    is logged and the remaining tenants are still visited.
    """

    name = "dispatcher"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float = 10.0,
        enforce_max_attempts: bool = True,
    ) -> None:
        super().__init__(interval_seconds)
        self.session_factory = session_factory
        self.enforce_max_attempts = enforce_max_attempts

    async def tick(self) -> int:
        """
        Dispatch at most one job per tenant.

        Returns:
            int: Number of job runs created
        """
        try:
            async with get_session(self.session_factory, read_only=True) as session:
                tenant_ids = await tenant_crud.list_ids(session)
        except Exception as e:
            log_exception_with_context(logger, "Dispatcher could not list tenants", e)
            return 0

        dispatched = 0
        for tenant_id in tenant_ids:
            try:
                run = await self.dispatch_tenant(tenant_id)
            except Exception as e:
                log_exception_with_context(
                    logger,
                    "Dispatcher failed for tenant",
                    e,
                    tenant_id=tenant_id,
                )
                continue
            if run is not None:
                dispatched += 1

        if dispatched:
            logger.info(
                f"Dispatched {dispatched} job(s)",
                extra={"component": self.name, "tenants": len(tenant_ids)},
            )
        return dispatched

    async def dispatch_tenant(self, tenant_id: str) -> JobRunModel | None:
        """
        Claim the tenant's next job and create its run.

        Args:
            tenant_id: Tenant to dispatch for

        Returns:
            The queued JobRunModel, or None when nothing was eligible
        """
        async with get_session(self.session_factory) as session:
            job = await job_crud.dequeue(
                session,
                tenant_id,
                enforce_max_attempts=self.enforce_max_attempts,
            )
            if job is None:
                return None

            run = await job_run_crud.create_for_job(session, job.id, tenant_id)
            logger.info(
                "Job dispatched",
                extra={
                    "tenant_id": tenant_id,
                    "job_id": job.id,
                    "run_id": run.id,
                    "kind": job.kind,
                    "attempt": job.attempts,
                },
            )
            return run
