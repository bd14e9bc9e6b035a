"""
Knowledge-base service orchestrator.

Dependencies: backend.boundary.db.CRUD
System role: Knowledge base browse and search
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import kb_entry_crud
from backend.boundary.db.models import KbCategory, KbEntryModel


class KbService:
    """Knowledge-base service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_entries(
        self,
        tenant_id: str,
        category: KbCategory | None = None,
        query: str | None = None,
    ) -> Sequence[KbEntryModel]:
        """
        List or search a tenant's entries.

        Args:
            tenant_id: Owning tenant
            category: Optional category filter
            query: Case-insensitive text matched against title and summary

        Returns:
            Sequence of KbEntryModels, newest first
        """
        if query and query.strip():
            return await kb_entry_crud.search(self.db, tenant_id, query.strip(), category=category)
        return await kb_entry_crud.list_for_tenant(self.db, tenant_id, category=category)
