"""
Job run ORM model.

One execution attempt of a Job. Retries produce new runs for the same job,
so run history is kept separately from the logical job state.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Per-attempt execution history
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin, value_enum
from backend.boundary.db.models.job_model import FailureKind


class JobRunStatus(str, enum.Enum):
    """
    Job run states.

    QUEUED: Created by the dispatcher, waiting for a worker
    RUNNING: Claimed by a worker
    SUCCEEDED: Handler returned a result
    FAILED: Handler raised or the job was invalid
    """

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobRunModel(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """
    Job run ORM model.

    Attributes:
        id: UUID string primary key
        tenant_id: Owning tenant (same as the parent job)
        job_id: Parent job
        status: Run state (see JobRunStatus)
        started_at: Set when a worker claims the run
        finished_at: Set on success or failure
        result: Handler result payload on success
        error: Failure message
        failure_kind: Failure classification
    """

    __tablename__ = "job_runs"

    job_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("jobs.id"),
        nullable=False,
        index=True,
    )

    status: Mapped[JobRunStatus] = mapped_column(
        value_enum(JobRunStatus),
        nullable=False,
        default=JobRunStatus.QUEUED,
    )

    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    result: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    failure_kind: Mapped[FailureKind | None] = mapped_column(
        value_enum(FailureKind),
        nullable=True,
    )

    __table_args__ = (Index("idx_job_runs_status_created", "status", "created_at"),)
