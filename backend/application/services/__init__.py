"""Service orchestrators."""

from .file_service import FileService
from .job_service import JobService
from .kb_service import KbService
from .stats_service import StatsService

__all__ = [
    "FileService",
    "JobService",
    "KbService",
    "StatsService",
]
