"""
Knowledge-base schemas.

Dependencies: pydantic
System role: Knowledge base API contracts
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backend.boundary.db.models import KbCategory


class KbEntryResponse(BaseModel):
    """Response schema for a knowledge-base entry."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    tenant_id: str
    file_id: str
    title: str
    summary: str
    category: KbCategory
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="entry_metadata")
    created_at: datetime


class KbListResponse(BaseModel):
    entries: list[KbEntryResponse]
    total: int
