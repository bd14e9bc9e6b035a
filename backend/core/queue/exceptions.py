"""
Job processing exceptions.

Raised by stage handlers and the worker's pre-flight checks. Each carries
the FailureKind persisted on the failed job and run; any other exception
escaping a handler is recorded as TRANSIENT.

Dependencies: backend.core.exceptions, backend.boundary.db.models
System role: Failure classification for the job queue
"""

from typing import Any

from backend.boundary.db.models import FailureKind
from backend.core.exceptions import IngestionException


class JobProcessingError(IngestionException):
    """Base exception for job execution failures."""

    failure_kind: FailureKind = FailureKind.TRANSIENT

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        failure_kind: FailureKind | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize job processing error.

        Args:
            message: Error message persisted on the job and run
            job_id: Job being processed
            failure_kind: Overrides the class default classification
            details: Additional context
        """
        details = details or {}
        if job_id:
            details["job_id"] = job_id
        if failure_kind is not None:
            self.failure_kind = failure_kind
        super().__init__(message, details)

    def __str__(self) -> str:
        # Stored verbatim in the job's error column
        return self.message


class InvalidJobMetadataError(JobProcessingError):
    """Raised when job metadata does not match the kind's schema."""

    failure_kind = FailureKind.INVALID_DATA


class UnknownJobKindError(JobProcessingError):
    """Raised when no handler is registered for a job kind."""

    failure_kind = FailureKind.UNKNOWN_KIND

    def __init__(self, kind: str, job_id: str | None = None) -> None:
        super().__init__(f"Unknown job kind: {kind}", job_id=job_id, details={"kind": kind})


class FileNotFoundForJobError(JobProcessingError):
    """Raised when the file referenced by a job does not exist."""

    failure_kind = FailureKind.INVALID_DATA

    def __init__(self, file_id: str, job_id: str | None = None) -> None:
        super().__init__(f"File not found: {file_id}", job_id=job_id, details={"file_id": file_id})


class MissingExtractedTextError(JobProcessingError):
    """Raised when analysis is requested for a file with no extracted text."""

    failure_kind = FailureKind.INVALID_DATA

    def __init__(self, file_id: str, job_id: str | None = None) -> None:
        super().__init__(
            f"No extracted text available for file: {file_id}",
            job_id=job_id,
            details={"file_id": file_id},
        )


class JobCanceledError(JobProcessingError):
    """Raised when a run's parent job was canceled before or during execution."""

    failure_kind = FailureKind.CANCELED

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job was canceled: {job_id}", job_id=job_id)


class JobNotFoundForRunError(JobProcessingError):
    """Raised when a run's parent job cannot be loaded."""

    failure_kind = FailureKind.INVALID_DATA

    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job not found: {job_id}", job_id=job_id)
