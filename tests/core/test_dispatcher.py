"""
Test suite for the per-tenant Dispatcher.

System role: Verification of fair fan-out from queued jobs to job runs
"""

from unittest.mock import patch

import pytest

from backend.boundary.db.CRUD import job_crud, job_run_crud, tenant_crud
from backend.boundary.db.models import JobRunStatus, JobStatus
from backend.core.queue import Dispatcher


class TestDispatcherTick:
    """Test suite for Dispatcher.tick()."""

    @pytest.mark.asyncio
    async def test_tick_should_dispatch_one_job_per_tenant(
        self,
        session_factory,
        make_job,
    ) -> None:
        """A tenant with a deep backlog cannot starve another tenant."""
        # Arrange
        async with session_factory() as session:
            for _ in range(3):
                await make_job(session, tenant_id="busy")
            quiet = await make_job(session, tenant_id="quiet")
            await session.commit()
        dispatcher = Dispatcher(session_factory)

        # Act
        dispatched = await dispatcher.tick()

        # Assert
        assert dispatched == 2
        async with session_factory() as session:
            busy_jobs = await job_crud.list_for_tenant(session, "busy")
            quiet_job = await job_crud.get_for_tenant(session, "quiet", quiet.id)
            runs = await job_run_crud.claim_queued(session, limit=10)
        assert sorted(job.status.value for job in busy_jobs) == ["queued", "queued", "running"]
        assert quiet_job.status == JobStatus.RUNNING
        assert sorted(run.tenant_id for run in runs) == ["busy", "quiet"]

    @pytest.mark.asyncio
    async def test_tick_should_create_queued_run_for_claimed_job(
        self,
        session_factory,
        make_job,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            job = await make_job(session)
            await session.commit()

        # Act
        await Dispatcher(session_factory).tick()

        # Assert
        async with session_factory() as session:
            runs = await job_run_crud.list_for_job(session, "tenant-a", job.id)
            stored = await job_crud.get_for_tenant(session, "tenant-a", job.id)
        assert len(runs) == 1
        assert runs[0].status == JobRunStatus.QUEUED
        assert stored.attempts == 1

    @pytest.mark.asyncio
    async def test_tick_should_return_zero_when_nothing_is_eligible(
        self,
        session_factory,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            await tenant_crud.ensure(session, "tenant-a")
            await session.commit()

        # Act / Assert
        assert await Dispatcher(session_factory).tick() == 0

    @pytest.mark.asyncio
    async def test_tick_should_continue_after_tenant_failure(
        self,
        session_factory,
        make_job,
    ) -> None:
        """One tenant's error is logged and the other tenants are still served."""
        # Arrange
        async with session_factory() as session:
            await make_job(session, tenant_id="broken")
            healthy = await make_job(session, tenant_id="healthy")
            await session.commit()

        real_dequeue = job_crud.dequeue

        async def flaky_dequeue(session, tenant_id, **kwargs):
            if tenant_id == "broken":
                raise RuntimeError("lock timeout")
            return await real_dequeue(session, tenant_id, **kwargs)

        # Act
        with patch.object(job_crud, "dequeue", side_effect=flaky_dequeue):
            dispatched = await Dispatcher(session_factory).tick()

        # Assert
        assert dispatched == 1
        async with session_factory() as session:
            stored = await job_crud.get_for_tenant(session, "healthy", healthy.id)
        assert stored.status == JobStatus.RUNNING

    @pytest.mark.asyncio
    async def test_tick_should_return_zero_when_tenants_cannot_be_listed(
        self,
        session_factory,
    ) -> None:
        # Arrange
        dispatcher = Dispatcher(session_factory)

        # Act
        with patch.object(tenant_crud, "list_ids", side_effect=RuntimeError("db down")):
            dispatched = await dispatcher.tick()

        # Assert
        assert dispatched == 0

    @pytest.mark.asyncio
    async def test_dispatch_tenant_should_fail_exhausted_jobs(
        self,
        session_factory,
        make_job,
    ) -> None:
        """Exhausted jobs are failed by the claim and produce no run."""
        # Arrange
        async with session_factory() as session:
            job = await make_job(session, max_attempts=1)
            await job_crud.dequeue(session, "tenant-a")
            await job_crud.update_status(session, "tenant-a", job.id, JobStatus.QUEUED)
            await session.commit()

        # Act
        run = await Dispatcher(session_factory).dispatch_tenant("tenant-a")

        # Assert
        assert run is None
        async with session_factory() as session:
            stored = await job_crud.get_for_tenant(session, "tenant-a", job.id)
        assert stored.status == JobStatus.FAILED
