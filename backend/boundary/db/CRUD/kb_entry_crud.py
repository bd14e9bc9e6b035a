"""
Knowledge-base entry CRUD operations.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Knowledge base persistence and search
"""

from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.sync_event_crud import sync_event_crud
from backend.boundary.db.models import KbCategory, KbEntryModel


class KbEntryCRUD(BaseCRUD[KbEntryModel]):
    """CRUD operations for KbEntryModel."""

    def __init__(self) -> None:
        super().__init__(KbEntryModel)

    async def create(self, session: AsyncSession, **kwargs) -> KbEntryModel:
        entry = await super().create(session, **kwargs)
        await sync_event_crud.record_kb_entry(session, entry)
        return entry

    async def get_by_file(
        self,
        session: AsyncSession,
        tenant_id: str,
        file_id: str,
    ) -> KbEntryModel | None:
        stmt = select(KbEntryModel).where(
            KbEntryModel.tenant_id == tenant_id,
            KbEntryModel.file_id == file_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: str,
        category: KbCategory | None = None,
        limit: int | None = None,
    ) -> Sequence[KbEntryModel]:
        """
        Tenant's entries, newest first.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            category: Optional category filter
            limit: Maximum number of entries

        Returns:
            Sequence of KbEntryModels
        """
        stmt = select(KbEntryModel).where(KbEntryModel.tenant_id == tenant_id)
        if category is not None:
            stmt = stmt.where(KbEntryModel.category == category)
        stmt = stmt.order_by(KbEntryModel.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def search(
        self,
        session: AsyncSession,
        tenant_id: str,
        query: str,
        category: KbCategory | None = None,
    ) -> Sequence[KbEntryModel]:
        """
        Case-insensitive substring search over title and summary.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            query: Search text
            category: Optional category filter

        Returns:
            Matching KbEntryModels, newest first
        """
        pattern = f"%{query}%"
        stmt = select(KbEntryModel).where(
            KbEntryModel.tenant_id == tenant_id,
            or_(KbEntryModel.title.ilike(pattern), KbEntryModel.summary.ilike(pattern)),
        )
        if category is not None:
            stmt = stmt.where(KbEntryModel.category == category)
        stmt = stmt.order_by(KbEntryModel.created_at.desc())
        result = await session.execute(stmt)
        return result.scalars().all()


kb_entry_crud = KbEntryCRUD()
