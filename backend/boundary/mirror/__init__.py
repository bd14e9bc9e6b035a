"""
Mirror store boundary.

Exports:
  - MirrorClient: PostgREST upsert client
  - job_row, file_row, kb_entry_row: Row snapshot builders
"""

from backend.boundary.mirror.mirror_client import MirrorClient
from backend.boundary.mirror.rows import (
    FILES_TABLE,
    JOBS_TABLE,
    KB_ENTRIES_TABLE,
    file_row,
    job_row,
    kb_entry_row,
)

__all__ = [
    "FILES_TABLE",
    "JOBS_TABLE",
    "KB_ENTRIES_TABLE",
    "MirrorClient",
    "file_row",
    "job_row",
    "kb_entry_row",
]
