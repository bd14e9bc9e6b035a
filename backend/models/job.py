"""
Job domain models and schemas.

Request/response schemas for the job queue API.

Dependencies: pydantic
System role: Job API contracts
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backend.boundary.db.models import FailureKind, JobRunStatus, JobStatus


class JobResponse(BaseModel):
    """Response schema for a job."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    tenant_id: str
    kind: str
    status: JobStatus
    priority: int
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="job_metadata")
    attempts: int
    max_attempts: int
    scheduled_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None
    failure_kind: FailureKind | None = None
    created_at: datetime
    updated_at: datetime


class JobListResponse(BaseModel):
    """Job list response, newest scheduled first."""

    jobs: list[JobResponse]
    total: int


class JobRunResponse(BaseModel):
    """Response schema for one execution attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    job_id: str
    status: JobRunStatus
    started_at: datetime | None = None
    finished_at: datetime | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    failure_kind: FailureKind | None = None
    created_at: datetime


class JobRunListResponse(BaseModel):
    """Run history of a job, oldest first."""

    runs: list[JobRunResponse]
    total: int


class CreateJobRequest(BaseModel):
    """Request schema for enqueueing a job of any registered kind."""

    kind: str = Field(min_length=1, description="Registered job kind")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Kind-specific payload")
    priority: int | None = Field(default=None, description="Higher runs first")
    scheduled_at: datetime | None = Field(default=None, description="Earliest start time")
    max_attempts: int | None = Field(default=None, ge=1, description="Attempt ceiling")
