"""
Exception hierarchy for the ingestion backend.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class IngestionException(Exception):
    """Base exception for all ingestion backend errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(IngestionException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class JobNotFoundError(IngestionException):
    """Raised when a job does not exist for the requesting tenant."""

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = job_id
        super().__init__(f"Job not found: {job_id}", details)


class FileRecordNotFoundError(IngestionException):
    """Raised when a file record does not exist for the requesting tenant."""

    def __init__(self, file_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["file_id"] = file_id
        super().__init__(f"File not found: {file_id}", details)


class InvalidJobTransitionError(IngestionException):
    """Raised when a retry or cancel request does not fit the job's state."""

    def __init__(
        self,
        job_id: str,
        current: str,
        target: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize transition error.

        Args:
            job_id: Job the request targeted
            current: Status the job is in
            target: Status the request asked for
            details: Additional context
        """
        details = details or {}
        details.update(job_id=job_id, current=current, target=target)
        super().__init__(f"Cannot move job {job_id} from {current} to {target}", details)


class JobRetryExhaustedError(IngestionException):
    """Raised when retrying a job that already used all its attempts."""

    def __init__(
        self,
        job_id: str,
        attempts: int,
        max_attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update(job_id=job_id, attempts=attempts, max_attempts=max_attempts)
        super().__init__(f"Job {job_id} has no attempts left", details)


class UploadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"File exceeds the {limit} byte upload limit",
            field="file",
            details={"size": size, "limit": limit},
        )
