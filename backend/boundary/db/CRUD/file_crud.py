"""
File CRUD operations.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Upload record persistence
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.CRUD.sync_event_crud import sync_event_crud
from backend.boundary.db.models import FileModel, FileStatus


class FileCRUD(BaseCRUD[FileModel]):
    """CRUD operations for FileModel; every mutation is mirrored."""

    def __init__(self) -> None:
        super().__init__(FileModel)

    async def create(self, session: AsyncSession, **kwargs) -> FileModel:
        file = await super().create(session, **kwargs)
        await sync_event_crud.record_file(session, file)
        return file

    async def list_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: str,
        limit: int | None = None,
    ) -> Sequence[FileModel]:
        """Tenant's files, most recent upload first."""
        stmt = (
            select(FileModel)
            .where(FileModel.tenant_id == tenant_id)
            .order_by(FileModel.uploaded_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_status(
        self,
        session: AsyncSession,
        tenant_id: str,
        file_id: str,
        status: FileStatus,
        extracted_text: str | None = None,
    ) -> FileModel | None:
        """
        Move a file to a new pipeline state.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            file_id: File id
            status: New pipeline state
            extracted_text: Stored alongside the status when given

        Returns:
            Updated FileModel, None if absent
        """
        values: dict = {"status": status}
        if extracted_text is not None:
            values["extracted_text"] = extracted_text

        file = await self.update_for_tenant(session, tenant_id, file_id, **values)
        if file is not None:
            await sync_event_crud.record_file(session, file)
        return file

    async def list_stuck_extracted(
        self,
        session: AsyncSession,
        older_than: datetime,
        limit: int = 100,
    ) -> Sequence[FileModel]:
        """Files left EXTRACTED since before `older_than`, across tenants."""
        stmt = (
            select(FileModel)
            .where(
                FileModel.status == FileStatus.EXTRACTED,
                FileModel.updated_at < older_than,
            )
            .order_by(FileModel.updated_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: str,
        status: FileStatus | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(FileModel).where(FileModel.tenant_id == tenant_id)
        if status is not None:
            stmt = stmt.where(FileModel.status == status)
        result = await session.execute(stmt)
        return int(result.scalar_one())


file_crud = FileCRUD()
