"""
Job ORM model.

Logical unit of requested pipeline work (text extraction, AI analysis),
owned by one tenant and claimed by the dispatcher in priority order.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Durable job queue table
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin, utcnow, value_enum


class JobKind(str, enum.Enum):
    """
    Built-in job kinds.

    TEXT_EXTRACT: Read uploaded bytes and store extracted text
    AI_ANALYZE: Send extracted text to the analyzer and create a KB entry

    The kind column is free text so new kinds only need a registered handler.
    """

    TEXT_EXTRACT = "text_extract"
    AI_ANALYZE = "ai_analyze"


class JobStatus(str, enum.Enum):
    """
    Job lifecycle states.

    QUEUED: Waiting for the dispatcher (eligible once scheduled_at has passed)
    RUNNING: Claimed by the dispatcher; a job run exists for it
    SUCCEEDED: Handler completed
    FAILED: Handler raised, data was invalid, or attempts were exhausted
    CANCELED: Canceled by request; never overwritten by the worker
    """

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELED)


class FailureKind(str, enum.Enum):
    """
    Enumerated failure classification stored next to the free-text error.

    TRANSIENT: I/O or provider failure; a blind retry may succeed
    INVALID_DATA: Missing file, missing extracted text, malformed metadata
    UNKNOWN_KIND: No handler registered for the job kind
    TIMEOUT: Handler exceeded its time budget
    CANCELED: Parent job was canceled before the run executed
    EXHAUSTED: Attempt ceiling reached
    """

    TRANSIENT = "transient"
    INVALID_DATA = "invalid_data"
    UNKNOWN_KIND = "unknown_kind"
    TIMEOUT = "timeout"
    CANCELED = "canceled"
    EXHAUSTED = "exhausted"


class JobModel(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """
    Job ORM model.

    Attributes:
        id: UUID string primary key
        tenant_id: Owning tenant
        kind: Job kind tag (see JobKind)
        status: Lifecycle state (see JobStatus)
        priority: Higher values are dequeued first
        scheduled_at: Not eligible for dequeue before this instant
        started_at: Set on every dequeue claim
        finished_at: Set when the job reaches a terminal state
        attempts: Number of dequeue claims (incremented only by dequeue)
        max_attempts: Attempt ceiling
        job_metadata: Kind-specific payload, {"file_id": ...} for built-in kinds
        error: Last failure message
        failure_kind: Last failure classification

    Workflow:
        1. Upload or a chaining handler inserts the job as QUEUED
        2. Dispatcher claims it (RUNNING, attempts + 1) and creates a job run
        3. Worker resolves it to SUCCEEDED or FAILED
        4. Retry requests move FAILED/CANCELED back to QUEUED; cancel moves
           QUEUED/RUNNING to CANCELED
    """

    __tablename__ = "jobs"

    kind: Mapped[str] = mapped_column(String(64), nullable=False)

    status: Mapped[JobStatus] = mapped_column(
        value_enum(JobStatus),
        nullable=False,
        default=JobStatus.QUEUED,
    )

    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    job_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    failure_kind: Mapped[FailureKind | None] = mapped_column(
        value_enum(FailureKind),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_jobs_dequeue", "tenant_id", "status", "priority", "scheduled_at"),
        Index("idx_jobs_tenant_scheduled", "tenant_id", "scheduled_at"),
    )
