"""
Router error handling utilities.

A decorator that maps service-layer exceptions onto HTTP responses so every
endpoint reports errors the same way.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from backend.core.exceptions import (
    FileRecordNotFoundError,
    IngestionException,
    InvalidJobTransitionError,
    JobNotFoundError,
    JobRetryExhaustedError,
    UploadTooLargeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_service_errors(func: F) -> F:
    """
    Decorator to transform service exceptions into HTTPExceptions.

    Mapping:
    - JobNotFoundError, FileRecordNotFoundError: 404
    - InvalidJobTransitionError, JobRetryExhaustedError: 409
    - UploadTooLargeError: 413
    - ValidationError: 400
    - anything else: 500
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except (JobNotFoundError, FileRecordNotFoundError) as e:
            logger.warning("Resource not found", extra={"error": e.message, **e.details})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except (InvalidJobTransitionError, JobRetryExhaustedError) as e:
            logger.warning("Conflicting job request", extra={"error": e.message, **e.details})
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

        except UploadTooLargeError as e:
            logger.warning("Upload rejected", extra={"error": e.message})
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=e.message,
            )

        except ValidationError as e:
            logger.warning("Invalid request", extra={"error": e.message})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except IngestionException as e:
            logger.exception("Service error", extra={"error": e.message})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            )

        except Exception as e:
            logger.exception("Unexpected failure in request", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"An internal error occurred: {e}",
            )

    return wrapper  # type: ignore
