"""
Core business logic module.

Contains the job queue (dispatcher, worker, stage handlers, sweeper), text
extraction, AI analysis and mirror sync, plus the exception hierarchy.
"""

from backend.core.exceptions import (
    FileRecordNotFoundError,
    IngestionException,
    InvalidJobTransitionError,
    JobNotFoundError,
    JobRetryExhaustedError,
    UploadTooLargeError,
    ValidationError,
)

__all__ = [
    "FileRecordNotFoundError",
    "IngestionException",
    "InvalidJobTransitionError",
    "JobNotFoundError",
    "JobRetryExhaustedError",
    "UploadTooLargeError",
    "ValidationError",
]
