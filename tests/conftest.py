"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory database engine and session factory, seeding factories
for tenants/files/jobs, a scripted analyzer, temp upload directories
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backend.boundary.db.base import Base
from backend.boundary.db.CRUD import file_crud, job_crud, tenant_crud
from backend.boundary.db.models import FileModel, FileStatus, JobKind, JobModel, KbCategory
from backend.core.ai.analyzer import AnalysisResult


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    A StaticPool keeps a single connection alive so every session produced
    by the factory sees the same in-memory database.

    Yields:
        async_sessionmaker: Factory bound to the test engine
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    yield factory

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_async_db(session_factory):
    """
    Single session on the test database.

    Yields:
        AsyncSession: Test database session, rolled back afterwards
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Directory standing in for the upload store."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def make_file(upload_dir: Path):
    """
    Factory registering a tenant and a stored text file.

    Returns:
        Callable: async (session, tenant_id=..., **fields) -> FileModel
    """

    async def _make_file(
        session: AsyncSession,
        tenant_id: str = "tenant-a",
        content: str = "Quarterly revenue grew by twelve percent.",
        original_name: str = "report.txt",
        mime_type: str = "text/plain",
        status: FileStatus = FileStatus.UPLOADED,
        extracted_text: str | None = None,
    ) -> FileModel:
        path = upload_dir / f"{uuid4()}{Path(original_name).suffix}"
        path.write_text(content, encoding="utf-8")
        await tenant_crud.ensure(session, tenant_id)
        return await file_crud.create(
            session,
            tenant_id=tenant_id,
            filename=path.name,
            original_name=original_name,
            mime_type=mime_type,
            size=len(content.encode("utf-8")),
            upload_path=str(path),
            status=status,
            extracted_text=extracted_text,
        )

    return _make_file


@pytest.fixture
def make_job():
    """
    Factory registering a tenant and enqueueing a job.

    Returns:
        Callable: async (session, tenant_id=..., kind=..., **fields) -> JobModel
    """

    async def _make_job(
        session: AsyncSession,
        tenant_id: str = "tenant-a",
        kind: str = JobKind.TEXT_EXTRACT.value,
        metadata: dict | None = None,
        **fields,
    ) -> JobModel:
        await tenant_crud.ensure(session, tenant_id)
        return await job_crud.create(
            session,
            tenant_id=tenant_id,
            kind=kind,
            metadata=metadata if metadata is not None else {"file_id": str(uuid4())},
            **fields,
        )

    return _make_job


class ScriptedAnalyzer:
    """Analyzer double returning a fixed result or raising a fixed error."""

    def __init__(
        self,
        result: AnalysisResult | None = None,
        error: Exception | None = None,
    ) -> None:
        self.result = result or AnalysisResult(
            title="Quarterly Revenue Report",
            summary="Revenue grew by twelve percent over the quarter.",
            category=KbCategory.DOCUMENTATION,
            tags=["finance", "quarterly"],
        )
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def analyze(self, text: str, filename: str) -> AnalysisResult:
        self.calls.append((text, filename))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def scripted_analyzer() -> ScriptedAnalyzer:
    """Analyzer double that succeeds with a documentation entry."""
    return ScriptedAnalyzer()
