"""
Tenant ORM model.

Account registry enumerated by the dispatcher on every tick.

Dependencies: sqlalchemy, backend.boundary.db.base
System role: Tenant partition registry
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.boundary.db.base import Base, utcnow


class TenantModel(Base):
    """
    Tenant ORM model.

    Attributes:
        id: Stable tenant identifier supplied by the auth layer
        display_name: Optional human-readable name
        created_at: Registration timestamp (UTC)
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
