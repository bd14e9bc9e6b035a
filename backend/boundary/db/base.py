"""
SQLAlchemy declarative base and common mixins.

Provides base class for all ORM models and reusable mixins
for common fields (timestamps, string UUID keys, tenant ownership).

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current UTC time used for every persisted timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a UUID v4 primary key in its canonical string form."""
    return str(uuid.uuid4())


def value_enum(enum_cls: type[enum.Enum]) -> Enum:
    """
    Non-native enum column type persisting member values.

    Stores "queued" rather than "QUEUED" so rows read the same in SQL,
    the API and the mirror store.
    """
    return Enum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for ORM model registration.

    All database models inherit from this class to ensure they're
    registered with the metadata and included in table creation.
    """

    pass


class UUIDMixin:
    """
    Mixin providing a UUID primary key to all models.

    Keys are stored as 36-character strings so they travel unchanged through
    JSON job metadata, URLs and the mirror store.

    Attributes:
        id: UUID v4 string primary key, auto-generated on insert
    """

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_id,
        nullable=False,
    )


class TenantMixin:
    """
    Mixin marking a row as owned by exactly one tenant partition.

    Every lookup in the CRUD layer filters on tenant_id; rows are never
    shared across tenants.

    Attributes:
        tenant_id: Owning tenant identifier (never empty)
    """

    tenant_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )


class TimestampMixin:
    """
    Mixin providing automatic timestamp tracking to all models.

    created_at is set once on row creation and never changes.
    updated_at is refreshed on every update via onupdate hook.
    Both use UTC timezone for consistency across deployments.

    Attributes:
        created_at: Row creation timestamp (UTC, immutable)
        updated_at: Last modification timestamp (UTC, auto-updated)
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
