"""
Test suite for the job run Worker.

Covers the full upload -> extract -> analyze pipeline and every failure
path: unknown kinds, malformed metadata, canceled jobs, timeouts and
handler errors with their rollback.

System role: Verification of job execution and failure bookkeeping
"""

import asyncio
from typing import Any

import pytest
from pydantic import BaseModel

from backend.boundary.db.CRUD import file_crud, job_crud, job_run_crud, kb_entry_crud
from backend.boundary.db.models import (
    FailureKind,
    FileStatus,
    JobKind,
    JobRunStatus,
    JobStatus,
    KbCategory,
)
from backend.core.ingestion import TextExtractor
from backend.core.queue import (
    Dispatcher,
    HandlerRegistry,
    TextExtractHandler,
    Worker,
    build_registry,
)


class SleepyMetadata(BaseModel):
    seconds: float


class SleepyHandler:
    """Handler that outlives its timeout."""

    kind = "sleepy"
    metadata_model = SleepyMetadata

    def __init__(self) -> None:
        self.failures: list[Exception] = []

    async def handle(self, session, job, metadata: SleepyMetadata) -> dict[str, Any]:
        await asyncio.sleep(metadata.seconds)
        return {"success": True}

    async def on_failure(self, session, tenant_id, metadata, error) -> None:
        self.failures.append(error)


class BrokenExtractor:
    async def extract(self, file_path: str, mime_type: str) -> str:
        raise RuntimeError("disk unavailable")


class CancelingHandler:
    """Wraps text_extract and cancels its own job through another session mid-run."""

    def __init__(self, inner: TextExtractHandler, session_factory, then_raise: bool = False) -> None:
        self.inner = inner
        self.kind = inner.kind
        self.metadata_model = inner.metadata_model
        self.session_factory = session_factory
        self.then_raise = then_raise
        self.failures: list[Exception] = []

    async def handle(self, session, job, metadata) -> dict[str, Any]:
        async with self.session_factory() as other:
            await job_crud.update_status(
                other, job.tenant_id, job.id, JobStatus.CANCELED, error="Canceled by request"
            )
            await other.commit()
        if self.then_raise:
            raise RuntimeError("extraction aborted")
        return await self.inner.handle(session, job, metadata)

    async def on_failure(self, session, tenant_id, metadata, error) -> None:
        self.failures.append(error)
        await self.inner.on_failure(session, tenant_id, metadata, error)


async def _run_pipeline_step(session_factory, worker: Worker) -> int:
    await Dispatcher(session_factory).tick()
    return await worker.tick()


async def _latest_run(session_factory, tenant_id: str, job_id: str):
    async with session_factory() as session:
        runs = await job_run_crud.list_for_job(session, tenant_id, job_id)
    return runs[-1]


@pytest.fixture
def registry(scripted_analyzer) -> HandlerRegistry:
    """Built-in handlers with a real extractor and a scripted analyzer."""
    return build_registry(TextExtractor(), scripted_analyzer)


@pytest.fixture
def worker(session_factory, registry: HandlerRegistry) -> Worker:
    return Worker(session_factory, registry, batch_size=5, handler_timeout_seconds=5.0)


class TestWorkerPipeline:
    """End-to-end runs through both built-in stages."""

    @pytest.mark.asyncio
    async def test_upload_should_flow_through_extract_and_analyze(
        self,
        session_factory,
        make_file,
        worker: Worker,
        scripted_analyzer,
    ) -> None:
        """A text upload ends analyzed with one knowledge-base entry."""
        # Arrange
        async with session_factory() as session:
            file = await make_file(session, content="Quarterly revenue grew by twelve percent.")
            extract_job = await job_crud.create(
                session,
                tenant_id="tenant-a",
                kind=JobKind.TEXT_EXTRACT.value,
                metadata={"file_id": file.id},
            )
            await session.commit()

        # Act: extraction
        processed = await _run_pipeline_step(session_factory, worker)

        # Assert: extraction
        assert processed == 1
        async with session_factory() as session:
            extracted = await file_crud.get_for_tenant(session, "tenant-a", file.id)
            extract_done = await job_crud.get_for_tenant(session, "tenant-a", extract_job.id)
            analyze_jobs = await job_crud.list_for_file(
                session, "tenant-a", file.id, kind=JobKind.AI_ANALYZE.value
            )
        assert extracted.status == FileStatus.EXTRACTED
        assert extracted.extracted_text == "Quarterly revenue grew by twelve percent."
        assert extract_done.status == JobStatus.SUCCEEDED
        assert extract_done.finished_at is not None
        assert len(analyze_jobs) == 1
        assert analyze_jobs[0].status == JobStatus.QUEUED
        extract_run = await _latest_run(session_factory, "tenant-a", extract_job.id)
        assert extract_run.status == JobRunStatus.SUCCEEDED
        assert extract_run.result == {"success": True, "next_job_id": analyze_jobs[0].id}

        # Act: analysis
        await _run_pipeline_step(session_factory, worker)

        # Assert: analysis
        async with session_factory() as session:
            analyzed = await file_crud.get_for_tenant(session, "tenant-a", file.id)
            entry = await kb_entry_crud.get_by_file(session, "tenant-a", file.id)
            analyze_job = await job_crud.get_for_tenant(session, "tenant-a", analyze_jobs[0].id)
        assert analyzed.status == FileStatus.ANALYZED
        assert analyze_job.status == JobStatus.SUCCEEDED
        assert entry.title == "Quarterly Revenue Report"
        assert entry.category == KbCategory.DOCUMENTATION
        assert entry.tags == ["finance", "quarterly"]
        assert entry.entry_metadata == {"original_filename": "report.txt", "mime_type": "text/plain"}
        assert scripted_analyzer.calls == [
            ("Quarterly revenue grew by twelve percent.", "report.txt")
        ]

    @pytest.mark.asyncio
    async def test_analysis_failure_should_leave_file_extracted(
        self,
        session_factory,
        make_file,
        worker: Worker,
        scripted_analyzer,
    ) -> None:
        """A provider error fails the job; the file stays extracted for the sweeper."""
        # Arrange
        scripted_analyzer.error = RuntimeError("quota exceeded")
        async with session_factory() as session:
            file = await make_file(session, status=FileStatus.EXTRACTED, extracted_text="text")
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="ai_analyze", metadata={"file_id": file.id}
            )
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        async with session_factory() as session:
            stored_job = await job_crud.get_for_tenant(session, "tenant-a", job.id)
            stored_file = await file_crud.get_for_tenant(session, "tenant-a", file.id)
            entry = await kb_entry_crud.get_by_file(session, "tenant-a", file.id)
        assert stored_job.status == JobStatus.FAILED
        assert stored_job.failure_kind == FailureKind.TRANSIENT
        assert stored_job.error == "quota exceeded"
        assert stored_file.status == FileStatus.EXTRACTED
        assert entry is None


class TestWorkerFailures:
    """Failure classification and bookkeeping."""

    @pytest.mark.asyncio
    async def test_unknown_kind_should_fail_run_and_job(
        self,
        session_factory,
        make_job,
        worker: Worker,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            job = await make_job(session, kind="mystery", metadata={})
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        async with session_factory() as session:
            stored = await job_crud.get_for_tenant(session, "tenant-a", job.id)
        assert run.status == JobRunStatus.FAILED
        assert run.failure_kind == FailureKind.UNKNOWN_KIND
        assert run.error == "Unknown job kind: mystery"
        assert run.finished_at is not None
        assert stored.status == JobStatus.FAILED
        assert stored.failure_kind == FailureKind.UNKNOWN_KIND

    @pytest.mark.asyncio
    async def test_malformed_metadata_should_fail_as_invalid_data(
        self,
        session_factory,
        make_job,
        worker: Worker,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            job = await make_job(session, kind="text_extract", metadata={"path": "/tmp/x"})
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        assert run.status == JobRunStatus.FAILED
        assert run.failure_kind == FailureKind.INVALID_DATA
        assert "file_id" in run.error

    @pytest.mark.asyncio
    async def test_missing_file_should_fail_as_invalid_data(
        self,
        session_factory,
        make_job,
        worker: Worker,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            job = await make_job(session, kind="text_extract", metadata={"file_id": "gone"})
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        assert run.failure_kind == FailureKind.INVALID_DATA
        assert run.error == "File not found: gone"

    @pytest.mark.asyncio
    async def test_canceled_job_should_not_run_and_stay_canceled(
        self,
        session_factory,
        make_file,
        worker: Worker,
    ) -> None:
        """A run whose job was canceled after dispatch fails without executing."""
        # Arrange
        async with session_factory() as session:
            file = await make_file(session)
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="text_extract", metadata={"file_id": file.id}
            )
            await session.commit()
        await Dispatcher(session_factory).tick()
        async with session_factory() as session:
            await job_crud.update_status(session, "tenant-a", job.id, JobStatus.CANCELED)
            await session.commit()

        # Act
        await worker.tick()

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        async with session_factory() as session:
            stored_job = await job_crud.get_for_tenant(session, "tenant-a", job.id)
            stored_file = await file_crud.get_for_tenant(session, "tenant-a", file.id)
        assert run.status == JobRunStatus.FAILED
        assert run.failure_kind == FailureKind.CANCELED
        assert stored_job.status == JobStatus.CANCELED
        assert stored_file.status == FileStatus.UPLOADED

    @pytest.mark.asyncio
    async def test_cancel_during_handler_should_discard_its_writes(
        self,
        session_factory,
        make_file,
    ) -> None:
        """Cancel wins over a handler that finishes after the cancel landed."""
        # Arrange
        handler = CancelingHandler(TextExtractHandler(TextExtractor()), session_factory)
        worker = Worker(session_factory, HandlerRegistry([handler]))
        async with session_factory() as session:
            file = await make_file(session)
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="text_extract", metadata={"file_id": file.id}
            )
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        async with session_factory() as session:
            stored_job = await job_crud.get_for_tenant(session, "tenant-a", job.id)
            stored_file = await file_crud.get_for_tenant(session, "tenant-a", file.id)
            analyze_jobs = await job_crud.list_for_file(session, "tenant-a", file.id, kind="ai_analyze")
        assert run.status == JobRunStatus.FAILED
        assert run.failure_kind == FailureKind.CANCELED
        assert stored_job.status == JobStatus.CANCELED
        assert stored_job.error == "Canceled by request"
        assert stored_file.status == FileStatus.UPLOADED
        assert stored_file.extracted_text is None
        assert analyze_jobs == []
        assert handler.failures == []

    @pytest.mark.asyncio
    async def test_cancel_then_handler_error_should_keep_job_canceled(
        self,
        session_factory,
        make_file,
    ) -> None:
        """The run records the handler error; the job and file are left alone."""
        # Arrange
        handler = CancelingHandler(
            TextExtractHandler(TextExtractor()), session_factory, then_raise=True
        )
        worker = Worker(session_factory, HandlerRegistry([handler]))
        async with session_factory() as session:
            file = await make_file(session)
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="text_extract", metadata={"file_id": file.id}
            )
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        async with session_factory() as session:
            stored_job = await job_crud.get_for_tenant(session, "tenant-a", job.id)
            stored_file = await file_crud.get_for_tenant(session, "tenant-a", file.id)
        assert run.status == JobRunStatus.FAILED
        assert run.failure_kind == FailureKind.TRANSIENT
        assert run.error == "extraction aborted"
        assert stored_job.status == JobStatus.CANCELED
        assert stored_job.error == "Canceled by request"
        assert stored_job.failure_kind is None
        assert stored_file.status == FileStatus.UPLOADED
        assert handler.failures == []

    @pytest.mark.asyncio
    async def test_handler_timeout_should_fail_with_timeout_kind(
        self,
        session_factory,
        make_job,
    ) -> None:
        # Arrange
        handler = SleepyHandler()
        worker = Worker(session_factory, HandlerRegistry([handler]), handler_timeout_seconds=0.05)
        async with session_factory() as session:
            job = await make_job(session, kind="sleepy", metadata={"seconds": 1})
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        run = await _latest_run(session_factory, "tenant-a", job.id)
        assert run.status == JobRunStatus.FAILED
        assert run.failure_kind == FailureKind.TIMEOUT
        assert run.error == "Handler timed out after 0.05s"
        assert len(handler.failures) == 1

    @pytest.mark.asyncio
    async def test_extraction_error_should_roll_back_and_fail_file(
        self,
        session_factory,
        make_file,
        scripted_analyzer,
    ) -> None:
        """Handler writes are discarded; the failure hook marks the file failed."""
        # Arrange
        worker = Worker(session_factory, build_registry(BrokenExtractor(), scripted_analyzer))
        async with session_factory() as session:
            file = await make_file(session)
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="text_extract", metadata={"file_id": file.id}
            )
            await session.commit()

        # Act
        await _run_pipeline_step(session_factory, worker)

        # Assert
        async with session_factory() as session:
            stored_job = await job_crud.get_for_tenant(session, "tenant-a", job.id)
            stored_file = await file_crud.get_for_tenant(session, "tenant-a", file.id)
            analyze_jobs = await job_crud.list_for_file(session, "tenant-a", file.id, kind="ai_analyze")
        assert stored_job.status == JobStatus.FAILED
        assert stored_job.error == "disk unavailable"
        assert stored_file.status == FileStatus.FAILED
        assert analyze_jobs == []

    @pytest.mark.asyncio
    async def test_one_failing_run_should_not_affect_the_batch(
        self,
        session_factory,
        make_file,
        make_job,
        worker: Worker,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            bad = await make_job(session, tenant_id="tenant-a", kind="mystery", metadata={})
            file = await make_file(session, tenant_id="tenant-b")
            good = await job_crud.create(
                session, tenant_id="tenant-b", kind="text_extract", metadata={"file_id": file.id}
            )
            await session.commit()
        await Dispatcher(session_factory).tick()

        # Act
        processed = await worker.tick()

        # Assert
        assert processed == 2
        async with session_factory() as session:
            assert (await job_crud.get_for_tenant(session, "tenant-a", bad.id)).status == JobStatus.FAILED
            assert (await job_crud.get_for_tenant(session, "tenant-b", good.id)).status == JobStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_tick_should_respect_batch_size(
        self,
        session_factory,
        make_job,
        registry: HandlerRegistry,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            for tenant_id in ("t1", "t2", "t3"):
                await make_job(session, tenant_id=tenant_id, kind="mystery", metadata={})
            await session.commit()
        await Dispatcher(session_factory).tick()
        worker = Worker(session_factory, registry, batch_size=2)

        # Act
        first = await worker.tick()
        second = await worker.tick()

        # Assert
        assert (first, second) == (2, 1)
