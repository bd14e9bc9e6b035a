"""
Observability module.

Provides logging configuration, structured logging helpers and HTTP
request logging middleware.
"""

from backend.observability.log_utils import log_exception_with_context, log_with_context
from backend.observability.logger import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "log_exception_with_context",
    "log_with_context",
]
