"""
Job API endpoints.

Routes: GET /jobs, POST /jobs, GET /jobs/{id}, GET /jobs/{id}/runs,
POST /jobs/{id}/retry, POST /jobs/{id}/cancel

Dependencies: backend.application.services.job_service, backend.models
System role: Job queue HTTP API
"""

from fastapi import APIRouter, Depends, Query, status

from backend.api.deps import get_job_service, get_tenant_id
from backend.api.routers.router_utils import handle_service_errors
from backend.application.services.job_service import JobService
from backend.boundary.db.models import JobStatus
from backend.models.job import (
    CreateJobRequest,
    JobListResponse,
    JobResponse,
    JobRunListResponse,
    JobRunResponse,
)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=JobListResponse)
@handle_service_errors
async def list_jobs(
    job_status: JobStatus | None = Query(default=None, alias="status"),
    tenant_id: str = Depends(get_tenant_id),
    job_service: JobService = Depends(get_job_service),
) -> JobListResponse:
    """List the tenant's jobs, newest scheduled first, optionally by status."""
    jobs = await job_service.list_jobs(tenant_id, status=job_status)
    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs],
        total=len(jobs),
    )


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_job(
    request: CreateJobRequest,
    tenant_id: str = Depends(get_tenant_id),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """
    Enqueue a job of any registered kind.

    Raises:
        HTTPException(400): Kind has no registered handler
    """
    job = await job_service.create_job(
        tenant_id=tenant_id,
        kind=request.kind,
        metadata=request.metadata,
        priority=request.priority,
        scheduled_at=request.scheduled_at,
        max_attempts=request.max_attempts,
    )
    return JobResponse.model_validate(job)


@router.get("/{job_id}", response_model=JobResponse)
@handle_service_errors
async def get_job(
    job_id: str,
    tenant_id: str = Depends(get_tenant_id),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """
    Get job status for polling.

    Raises:
        HTTPException(404): Job not found for this tenant
    """
    return JobResponse.model_validate(await job_service.get_job(tenant_id, job_id))


@router.get("/{job_id}/runs", response_model=JobRunListResponse)
@handle_service_errors
async def list_job_runs(
    job_id: str,
    tenant_id: str = Depends(get_tenant_id),
    job_service: JobService = Depends(get_job_service),
) -> JobRunListResponse:
    """Execution attempts of a job, oldest first."""
    runs = await job_service.list_runs(tenant_id, job_id)
    return JobRunListResponse(
        runs=[JobRunResponse.model_validate(run) for run in runs],
        total=len(runs),
    )


@router.post("/{job_id}/retry", response_model=JobResponse)
@handle_service_errors
async def retry_job(
    job_id: str,
    tenant_id: str = Depends(get_tenant_id),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """
    Re-queue a failed or canceled job.

    Raises:
        HTTPException(404): Job not found for this tenant
        HTTPException(409): Job is not failed/canceled, or has no attempts left
    """
    return JobResponse.model_validate(await job_service.retry_job(tenant_id, job_id))


@router.post("/{job_id}/cancel", response_model=JobResponse)
@handle_service_errors
async def cancel_job(
    job_id: str,
    tenant_id: str = Depends(get_tenant_id),
    job_service: JobService = Depends(get_job_service),
) -> JobResponse:
    """
    Cancel a queued or running job.

    Raises:
        HTTPException(404): Job not found for this tenant
        HTTPException(409): Job already finished
    """
    return JobResponse.model_validate(await job_service.cancel_job(tenant_id, job_id))
