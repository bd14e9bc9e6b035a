"""
Sync event ORM model (mirror outbox).

A change event is appended in the same transaction as every job, file and
knowledge-base mutation; the mirror drainer delivers pending events to the
external store asynchronously.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Transactional outbox for mirror sync
"""

import enum

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, TenantMixin, TimestampMixin, UUIDMixin, value_enum


class SyncEventStatus(str, enum.Enum):
    """
    Outbox delivery states.

    PENDING: Waiting for (re)delivery
    DELIVERED: Upserted into the mirror
    FAILED: Delivery attempts exhausted; kept for inspection until purged
    """

    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


class SyncEventModel(Base, UUIDMixin, TenantMixin, TimestampMixin):
    """
    Sync event ORM model.

    Attributes:
        table_name: Mirror table receiving the row (jobs, files, kb_entries)
        record_id: Primary key of the mirrored row
        payload: Row snapshot taken when the change was recorded
        status: Delivery state (see SyncEventStatus)
        attempts: Delivery attempts so far
        last_error: Last delivery failure message
    """

    __tablename__ = "sync_events"

    table_name: Mapped[str] = mapped_column(String(64), nullable=False)
    record_id: Mapped[str] = mapped_column(String(36), nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    status: Mapped[SyncEventStatus] = mapped_column(
        value_enum(SyncEventStatus),
        nullable=False,
        default=SyncEventStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("idx_sync_events_status_created", "status", "created_at"),)
