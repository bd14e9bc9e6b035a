"""
File domain models and schemas.

Dependencies: pydantic
System role: File upload API contracts
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from backend.boundary.db.models import FileStatus

from backend.models.job import JobResponse


class FileResponse(BaseModel):
    """Response schema for an uploaded file."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    status: FileStatus
    extracted_text: str | None = None
    uploaded_at: datetime


class FileListResponse(BaseModel):
    """File list response, most recent upload first."""

    files: list[FileResponse]
    total: int


class FileUploadResponse(BaseModel):
    """Upload result: the stored file and its text_extract job."""

    file: FileResponse
    job: JobResponse
