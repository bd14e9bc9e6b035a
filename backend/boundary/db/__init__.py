"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TenantMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(), get_session(): Async connection management
  - JobModel, JobRunModel, FileModel, KbEntryModel, TenantModel, SyncEventModel: Domain entities
  - job_crud, job_run_crud, file_crud, kb_entry_crud, tenant_crud, sync_event_crud: CRUD singletons

Dependencies: sqlalchemy, backend.configs
System role: Database adapter providing tenant-partitioned storage for the
job queue, uploaded files, and the knowledge base.
"""

from backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin
from backend.boundary.db.connection import (
    create_all_tables,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
    get_session,
)
from backend.boundary.db.models import (
    FailureKind,
    FileModel,
    FileStatus,
    JobKind,
    JobModel,
    JobRunModel,
    JobRunStatus,
    JobStatus,
    KbCategory,
    KbEntryModel,
    SyncEventModel,
    SyncEventStatus,
    TenantModel,
)
from backend.boundary.db.CRUD import (
    file_crud,
    job_crud,
    job_run_crud,
    kb_entry_crud,
    sync_event_crud,
    tenant_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TenantMixin",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_all_tables",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "get_session",
    # Models
    "FailureKind",
    "FileModel",
    "FileStatus",
    "JobKind",
    "JobModel",
    "JobRunModel",
    "JobRunStatus",
    "JobStatus",
    "KbCategory",
    "KbEntryModel",
    "SyncEventModel",
    "SyncEventStatus",
    "TenantModel",
    # CRUD singletons
    "file_crud",
    "job_crud",
    "job_run_crud",
    "kb_entry_crud",
    "sync_event_crud",
    "tenant_crud",
]
