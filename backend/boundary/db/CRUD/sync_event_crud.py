"""
Sync event CRUD operations (mirror outbox).

Mutating CRUD methods for jobs, files and knowledge-base entries call the
record_* helpers with the post-update row so the outbox entry commits or
rolls back together with the change it describes.

Dependencies: sqlalchemy, backend.boundary.db.models, backend.boundary.mirror.rows
System role: Transactional outbox persistence
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models import (
    FileModel,
    JobModel,
    KbEntryModel,
    SyncEventModel,
    SyncEventStatus,
)
from backend.boundary.mirror.rows import (
    FILES_TABLE,
    JOBS_TABLE,
    KB_ENTRIES_TABLE,
    file_row,
    job_row,
    kb_entry_row,
)


class SyncEventCRUD(BaseCRUD[SyncEventModel]):
    """CRUD operations for the mirror outbox."""

    def __init__(self) -> None:
        super().__init__(SyncEventModel)

    async def record(
        self,
        session: AsyncSession,
        tenant_id: str,
        table_name: str,
        record_id: str,
        payload: dict,
    ) -> SyncEventModel:
        """Append a pending event in the caller's transaction."""
        event = SyncEventModel(
            tenant_id=tenant_id,
            table_name=table_name,
            record_id=record_id,
            payload=payload,
            status=SyncEventStatus.PENDING,
            attempts=0,
        )
        session.add(event)
        await session.flush()
        return event

    async def record_job(self, session: AsyncSession, job: JobModel) -> SyncEventModel:
        return await self.record(session, job.tenant_id, JOBS_TABLE, job.id, job_row(job))

    async def record_file(self, session: AsyncSession, file: FileModel) -> SyncEventModel:
        return await self.record(session, file.tenant_id, FILES_TABLE, file.id, file_row(file))

    async def record_kb_entry(self, session: AsyncSession, entry: KbEntryModel) -> SyncEventModel:
        return await self.record(
            session, entry.tenant_id, KB_ENTRIES_TABLE, entry.id, kb_entry_row(entry)
        )

    async def fetch_pending(
        self,
        session: AsyncSession,
        limit: int,
    ) -> Sequence[SyncEventModel]:
        """
        Retrieve pending events, oldest first.

        Args:
            session: Async database session
            limit: Maximum number of events

        Returns:
            Sequence of pending SyncEventModels
        """
        stmt = (
            select(SyncEventModel)
            .where(SyncEventModel.status == SyncEventStatus.PENDING)
            .order_by(SyncEventModel.created_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_delivered(self, session: AsyncSession, event_id: str) -> None:
        stmt = (
            update(SyncEventModel)
            .where(SyncEventModel.id == event_id)
            .values(
                status=SyncEventStatus.DELIVERED,
                attempts=SyncEventModel.attempts + 1,
                last_error=None,
            )
        )
        await session.execute(stmt)

    async def mark_failed_attempt(
        self,
        session: AsyncSession,
        event_id: str,
        error: str,
        max_attempts: int,
    ) -> SyncEventModel | None:
        """
        Count one failed delivery; park the event as failed at the ceiling.

        Args:
            session: Async database session
            event_id: Outbox event id
            error: Delivery failure message
            max_attempts: Attempts allowed before parking

        Returns:
            Updated SyncEventModel, None if absent
        """
        event = await self.get_by_id(session, event_id)
        if event is None:
            return None

        attempts = event.attempts + 1
        status = SyncEventStatus.FAILED if attempts >= max_attempts else SyncEventStatus.PENDING
        stmt = (
            update(SyncEventModel)
            .where(SyncEventModel.id == event_id)
            .values(status=status, attempts=attempts, last_error=error)
            .returning(SyncEventModel)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def discard(self, session: AsyncSession, event_ids: Sequence[str]) -> int:
        """Delete events whose snapshot a newer event of the same record replaces."""
        if not event_ids:
            return 0
        stmt = (
            delete(SyncEventModel)
            .where(SyncEventModel.id.in_(list(event_ids)))
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def purge(
        self,
        session: AsyncSession,
        status: SyncEventStatus,
        before: datetime,
    ) -> int:
        """
        Delete settled events created before a cutoff.

        Args:
            session: Async database session
            status: DELIVERED or FAILED; pending events are never purged
            before: Events created earlier than this are removed

        Returns:
            int: Number of events deleted
        """
        if status == SyncEventStatus.PENDING:
            raise ValueError("pending events cannot be purged")
        stmt = (
            delete(SyncEventModel)
            .where(SyncEventModel.status == status, SyncEventModel.created_at < before)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def count_by_status(self, session: AsyncSession, status: SyncEventStatus) -> int:
        stmt = select(func.count()).select_from(SyncEventModel).where(SyncEventModel.status == status)
        result = await session.execute(stmt)
        return int(result.scalar_one())


sync_event_crud = SyncEventCRUD()
