"""
Logging utilities for safe structured logging.

Helpers that turn arbitrary context values into short strings before they
are attached to a log record through `extra`.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import enum
import logging
from datetime import datetime
from typing import Any


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Safely convert any value to a string for logging.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, enum.Enum):
            val_str = str(value.value)
        elif isinstance(value, datetime):
            val_str = value.isoformat()
        elif isinstance(value, str):
            val_str = value
        elif isinstance(value, (list, tuple)):
            val_str = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            val_str = f"dict({len(value)} keys)"
        else:
            val_str = str(value)

        if len(val_str) > max_length:
            return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
        return val_str
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with structured context, safely converting all values.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Context dict with arbitrary key-value pairs
    """
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    logger.log(level, message, extra=safe_context)


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context,
) -> None:
    """
    Log an exception with its traceback and context.

    Failure classification and details carried by application exceptions
    are added to the context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional context dict
    """
    safe_context = {key: safe_log_value(val) for key, val in context.items()}
    safe_context.update(
        {
            "error_type": type(exc).__name__,
            "error_msg": safe_log_value(getattr(exc, "message", None) or str(exc)),
        }
    )
    failure_kind = getattr(exc, "failure_kind", None)
    if failure_kind is not None:
        safe_context["failure_kind"] = safe_log_value(failure_kind)
    details = getattr(exc, "details", None)
    if details:
        safe_context["error_details"] = safe_log_value(str(details))
    logger.error(message, exc_info=exc, extra=safe_context)
