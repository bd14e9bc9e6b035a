"""
Mirror row builders.

Snapshot jobs, files and knowledge-base entries into the snake_case row
shape expected by the mirror tables.

Dependencies: backend.boundary.db.models
System role: Mirror payload serialization
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backend.boundary.db.models import FileModel, JobModel, KbEntryModel

JOBS_TABLE = "jobs"
FILES_TABLE = "files"
KB_ENTRIES_TABLE = "kb_entries"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def job_row(job: JobModel) -> dict[str, Any]:
    return {
        "id": job.id,
        "tenant_id": job.tenant_id,
        "kind": job.kind,
        "status": _plain(job.status),
        "priority": job.priority,
        "metadata": job.job_metadata or {},
        "error": job.error,
        "failure_kind": _plain(job.failure_kind),
        "attempts": job.attempts,
        "max_attempts": job.max_attempts,
        "scheduled_at": _iso(job.scheduled_at),
        "started_at": _iso(job.started_at),
        "finished_at": _iso(job.finished_at),
        "created_at": _iso(job.created_at),
    }


def file_row(file: FileModel) -> dict[str, Any]:
    return {
        "id": file.id,
        "tenant_id": file.tenant_id,
        "filename": file.filename,
        "original_name": file.original_name,
        "mime_type": file.mime_type,
        "size": file.size,
        "status": _plain(file.status),
        "extracted_text": file.extracted_text,
        "uploaded_at": _iso(file.uploaded_at),
    }


def kb_entry_row(entry: KbEntryModel) -> dict[str, Any]:
    return {
        "id": entry.id,
        "tenant_id": entry.tenant_id,
        "file_id": entry.file_id,
        "title": entry.title,
        "summary": entry.summary,
        "category": _plain(entry.category),
        "tags": list(entry.tags or []),
        "metadata": entry.entry_metadata or {},
        "created_at": _iso(entry.created_at),
    }
