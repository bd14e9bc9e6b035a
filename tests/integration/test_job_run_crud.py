"""
Test suite for JobRunCRUD database operations.

System role: Verification of per-attempt run history and worker claims
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import job_crud
from backend.boundary.db.CRUD.job_run_crud import job_run_crud
from backend.boundary.db.models import FailureKind, JobRunStatus


class TestJobRunCRUDCreate:
    """Test suite for JobRunCRUD.create_for_job()."""

    @pytest.mark.asyncio
    async def test_create_for_job_should_queue_run(
        self,
        test_async_db: AsyncSession,
        make_job,
    ) -> None:
        # Arrange
        job = await make_job(test_async_db)

        # Act
        run = await job_run_crud.create_for_job(test_async_db, job.id, job.tenant_id)

        # Assert
        assert run.job_id == job.id
        assert run.tenant_id == "tenant-a"
        assert run.status == JobRunStatus.QUEUED
        assert run.started_at is None


class TestJobRunCRUDClaimQueued:
    """Test suite for JobRunCRUD.claim_queued()."""

    @pytest.mark.asyncio
    async def test_claim_should_take_oldest_runs_up_to_limit(
        self,
        test_async_db: AsyncSession,
        make_job,
    ) -> None:
        """Runs from all tenants are claimed in creation order."""
        # Arrange
        runs = []
        for tenant_id in ("tenant-a", "tenant-b", "tenant-a"):
            job = await make_job(test_async_db, tenant_id=tenant_id)
            runs.append(await job_run_crud.create_for_job(test_async_db, job.id, tenant_id))

        # Act
        claimed = await job_run_crud.claim_queued(test_async_db, limit=2)

        # Assert
        assert [run.id for run in claimed] == [runs[0].id, runs[1].id]
        assert all(run.status == JobRunStatus.RUNNING for run in claimed)
        assert all(run.started_at is not None for run in claimed)

    @pytest.mark.asyncio
    async def test_claim_should_never_return_a_run_twice(
        self,
        test_async_db: AsyncSession,
        make_job,
    ) -> None:
        # Arrange
        job = await make_job(test_async_db)
        await job_run_crud.create_for_job(test_async_db, job.id, job.tenant_id)

        # Act
        first = await job_run_crud.claim_queued(test_async_db, limit=5)
        second = await job_run_crud.claim_queued(test_async_db, limit=5)

        # Assert
        assert len(first) == 1
        assert second == []


class TestJobRunCRUDUpdateStatus:
    """Test suite for JobRunCRUD.update_status() and history."""

    @pytest.mark.asyncio
    async def test_failed_run_should_store_error_and_finish_time(
        self,
        test_async_db: AsyncSession,
        make_job,
    ) -> None:
        # Arrange
        job = await make_job(test_async_db)
        run = await job_run_crud.create_for_job(test_async_db, job.id, job.tenant_id)

        # Act
        updated = await job_run_crud.update_status(
            test_async_db,
            "tenant-a",
            run.id,
            JobRunStatus.FAILED,
            error="Unknown job kind: mystery",
            failure_kind=FailureKind.UNKNOWN_KIND,
        )

        # Assert
        assert updated.status == JobRunStatus.FAILED
        assert updated.finished_at is not None
        assert updated.error == "Unknown job kind: mystery"
        assert updated.failure_kind == FailureKind.UNKNOWN_KIND

    @pytest.mark.asyncio
    async def test_list_for_job_should_return_history_oldest_first(
        self,
        test_async_db: AsyncSession,
        make_job,
    ) -> None:
        """Each retry adds a run; history keeps all of them."""
        # Arrange
        job = await make_job(test_async_db)
        first = await job_run_crud.create_for_job(test_async_db, job.id, job.tenant_id)
        await job_run_crud.update_status(
            test_async_db, "tenant-a", first.id, JobRunStatus.SUCCEEDED, result={"success": True}
        )
        second = await job_run_crud.create_for_job(test_async_db, job.id, job.tenant_id)
        other_job = await make_job(test_async_db)
        await job_run_crud.create_for_job(test_async_db, other_job.id, other_job.tenant_id)

        # Act
        history = await job_run_crud.list_for_job(test_async_db, "tenant-a", job.id)

        # Assert
        assert [run.id for run in history] == [first.id, second.id]
        assert history[0].result == {"success": True}
        assert await job_run_crud.list_for_job(test_async_db, "tenant-b", job.id) == []

    @pytest.mark.asyncio
    async def test_run_should_reference_existing_job(
        self,
        test_async_db: AsyncSession,
        make_job,
    ) -> None:
        # Arrange
        job = await make_job(test_async_db)
        run = await job_run_crud.create_for_job(test_async_db, job.id, job.tenant_id)

        # Act
        parent = await job_crud.get_for_tenant(test_async_db, run.tenant_id, run.job_id)

        # Assert
        assert parent.id == job.id
