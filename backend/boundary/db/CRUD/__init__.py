"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from backend.boundary.db.CRUD import job_crud, job_run_crud

    job = await job_crud.dequeue(db, tenant_id)
    run = await job_run_crud.create_for_job(db, job.id, tenant_id)
"""

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.sync_event_crud import SyncEventCRUD, sync_event_crud
from backend.boundary.db.CRUD.job_crud import JobCRUD, job_crud
from backend.boundary.db.CRUD.job_run_crud import JobRunCRUD, job_run_crud
from backend.boundary.db.CRUD.file_crud import FileCRUD, file_crud
from backend.boundary.db.CRUD.kb_entry_crud import KbEntryCRUD, kb_entry_crud
from backend.boundary.db.CRUD.tenant_crud import TenantCRUD, tenant_crud

__all__ = [
    "BaseCRUD",
    "FileCRUD",
    "JobCRUD",
    "JobRunCRUD",
    "KbEntryCRUD",
    "SyncEventCRUD",
    "TenantCRUD",
    "file_crud",
    "job_crud",
    "job_run_crud",
    "kb_entry_crud",
    "sync_event_crud",
    "tenant_crud",
]
