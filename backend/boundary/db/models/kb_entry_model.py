"""
Knowledge-base entry ORM model.

Searchable record derived from one successfully analyzed file.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Knowledge base persistence
"""

import enum

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin, value_enum


class KbCategory(str, enum.Enum):
    """Fixed category taxonomy the analyzer must choose from."""

    CODE = "Code"
    DOCUMENTATION = "Documentation"
    DATA = "Data"
    IMAGE = "Image"
    DOCUMENT = "Document"
    SPREADSHEET = "Spreadsheet"
    PRESENTATION = "Presentation"
    ARCHIVE = "Archive"
    OTHER = "Other"


class KbEntryModel(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """
    Knowledge-base entry ORM model.

    Created once by the ai_analyze handler; immutable afterwards.

    Attributes:
        id: UUID string primary key
        tenant_id: Owning tenant
        file_id: Analyzed file (one entry per file)
        title: Analyzer-provided title
        summary: Analyzer-provided summary
        category: Taxonomy category (see KbCategory)
        tags: Ordered list of tags
        entry_metadata: Source details (original filename, mime type)
        created_at: Creation timestamp (UTC)
    """

    __tablename__ = "kb_entries"

    file_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("files.id"),
        nullable=False,
        unique=True,
    )

    title: Mapped[str] = mapped_column(String(512), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[KbCategory] = mapped_column(
        value_enum(KbCategory),
        nullable=False,
        default=KbCategory.OTHER,
    )

    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    entry_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
