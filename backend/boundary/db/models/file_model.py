"""
File ORM model.

Represents an uploaded artifact and its progress through the
extract → analyze pipeline.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Upload persistence for ingestion tracking
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin, utcnow, value_enum


class FileStatus(str, enum.Enum):
    """
    File pipeline states.

    UPLOADED: Bytes stored, text_extract job queued
    EXTRACTED: Text extracted, ai_analyze job queued
    ANALYZED: Knowledge-base entry created
    FAILED: Extraction failed or analysis could not be recovered
    """

    UPLOADED = "uploaded"
    EXTRACTED = "extracted"
    ANALYZED = "analyzed"
    FAILED = "failed"


class FileModel(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """
    File ORM model.

    Lifecycle: Upload (UPLOADED) → text_extract succeeds (EXTRACTED) →
    ai_analyze succeeds (ANALYZED). Extraction failure or an exhausted
    analysis budget moves the file to FAILED.

    Attributes:
        id: UUID string primary key
        tenant_id: Owning tenant
        filename: Stored filename (uuid + extension)
        original_name: Client-supplied filename
        mime_type: Client-supplied content type
        size: Size in bytes
        upload_path: Location of the stored bytes
        status: Pipeline state (see FileStatus)
        extracted_text: Output of text extraction
        uploaded_at: Upload timestamp (UTC)
    """

    __tablename__ = "files"

    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(1024), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    upload_path: Mapped[str] = mapped_column(String(2048), nullable=False)

    status: Mapped[FileStatus] = mapped_column(
        value_enum(FileStatus),
        nullable=False,
        default=FileStatus.UPLOADED,
    )

    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
