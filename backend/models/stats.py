"""
Dashboard statistics schema.

Dependencies: pydantic
System role: Stats API contract
"""

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    """Per-tenant totals."""

    total_files: int
    total_jobs: int
    total_kb_entries: int
    jobs_by_status: dict[str, int] = Field(default_factory=dict)
    files_by_status: dict[str, int] = Field(default_factory=dict)
