"""
File API endpoints.

Routes: POST /files/upload, GET /files, GET /files/{id}

Dependencies: backend.application.services.file_service, backend.models
System role: Upload HTTP API
"""

from fastapi import APIRouter, Depends, File, UploadFile, status

from backend.api.deps import get_file_service, get_settings_dependency, get_tenant_id
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.file_service import FileService
from backend.configs import Settings
from backend.core.exceptions import ValidationError
from backend.models.file import FileListResponse, FileResponse, FileUploadResponse
from backend.models.job import JobResponse

router = APIRouter(prefix="/files", tags=["files"])


@router.post(
    "/upload",
    response_model=FileUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
@handle_service_errors
async def upload_file(
    file: UploadFile | None = File(default=None),
    tenant_id: str = Depends(get_tenant_id),
    file_service: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_settings_dependency),
) -> FileUploadResponse:
    """
    Upload a file and queue its text extraction.

    Reads at most one byte past the size limit so oversized uploads are
    rejected without buffering them whole.

    Raises:
        HTTPException(400): No file in the request
        HTTPException(413): File larger than the upload limit
    """
    if file is None or not file.filename:
        raise ValidationError("No file uploaded", field="file")

    content = await file.read(settings.storage.max_upload_bytes + 1)
    stored, job = await file_service.upload(
        tenant_id=tenant_id,
        original_name=file.filename,
        mime_type=file.content_type,
        content=content,
    )
    return FileUploadResponse(
        file=FileResponse.model_validate(stored),
        job=JobResponse.model_validate(job),
    )


@router.get("", response_model=FileListResponse)
@handle_service_errors
async def list_files(
    tenant_id: str = Depends(get_tenant_id),
    file_service: FileService = Depends(get_file_service),
) -> FileListResponse:
    """List the tenant's files, most recent upload first."""
    files = await file_service.list_files(tenant_id)
    return FileListResponse(
        files=[FileResponse.model_validate(f) for f in files],
        total=len(files),
    )


@router.get("/{file_id}", response_model=FileResponse)
@handle_service_errors
async def get_file(
    file_id: str,
    tenant_id: str = Depends(get_tenant_id),
    file_service: FileService = Depends(get_file_service),
) -> FileResponse:
    """Get one file with its pipeline status and extracted text."""
    return FileResponse.model_validate(await file_service.get_file(tenant_id, file_id))
