"""
Database models package.

Exports:
  - JobModel, JobStatus, JobKind, FailureKind: Job queue table and enums
  - JobRunModel, JobRunStatus: Per-attempt run history
  - FileModel, FileStatus: Uploaded files and pipeline state
  - KbEntryModel, KbCategory: Knowledge-base entries and taxonomy
  - TenantModel: Tenant registry
  - SyncEventModel, SyncEventStatus: Mirror outbox

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Database model definitions for domain entities
"""

from backend.boundary.db.models.file_model import FileModel, FileStatus
from backend.boundary.db.models.job_model import FailureKind, JobKind, JobModel, JobStatus
from backend.boundary.db.models.job_run_model import JobRunModel, JobRunStatus
from backend.boundary.db.models.kb_entry_model import KbCategory, KbEntryModel
from backend.boundary.db.models.sync_event_model import SyncEventModel, SyncEventStatus
from backend.boundary.db.models.tenant_model import TenantModel

__all__ = [
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
]
