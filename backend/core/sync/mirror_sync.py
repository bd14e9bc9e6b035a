"""
Mirror outbox drainer.

Delivers pending sync events to the mirror store. Delivery problems are
counted on the event and logged; they never reach the operation that
recorded the event.

Each event carries a full row snapshot, so only the newest pending event of
a record is delivered and the older ones it replaces are discarded. A stale
snapshot can therefore never be upserted over a newer one.

Dependencies: sqlalchemy, backend.boundary.db
System role: Asynchronous mirror sync
"""

import logging
from datetime import timedelta
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.boundary.db.base import utcnow
from backend.boundary.db.connection import get_session
from backend.boundary.db.CRUD import sync_event_crud
from backend.boundary.db.models import SyncEventStatus
from backend.core.queue.loop import PollingLoop

logger = logging.getLogger(__name__)


class MirrorSink(Protocol):
    async def upsert(self, table: str, row: dict[str, Any]) -> None: ...


class MirrorSyncDrainer(PollingLoop):
    """Push the latest pending snapshot of each record to the mirror."""

    name = "mirror_sync"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client: MirrorSink,
        interval_seconds: float = 2.0,
        batch_size: int = 50,
        max_attempts: int = 5,
        delivered_retention_seconds: float = 3600.0,
        failed_retention_seconds: float = 7 * 24 * 3600.0,
    ) -> None:
        super().__init__(interval_seconds)
        self.session_factory = session_factory
        self.client = client
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.delivered_retention_seconds = delivered_retention_seconds
        self.failed_retention_seconds = failed_retention_seconds

    async def tick(self) -> int:
        """
        Deliver one batch of pending events, then purge settled ones.

        Returns:
            int: Number of events delivered
        """
        async with get_session(self.session_factory, read_only=True) as session:
            events = await sync_event_crud.fetch_pending(session, self.batch_size)
            batch = [
                (event.id, event.table_name, event.record_id, event.payload) for event in events
            ]

        # Oldest first, so a later event of the same record replaces an earlier one
        latest: dict[tuple[str, str], tuple[str, dict]] = {}
        superseded: list[str] = []
        for event_id, table_name, record_id, payload in batch:
            key = (table_name, record_id)
            if key in latest:
                superseded.append(latest[key][0])
            latest[key] = (event_id, payload)

        if superseded:
            async with get_session(self.session_factory) as session:
                await sync_event_crud.discard(session, superseded)

        delivered = 0
        for (table_name, _), (event_id, payload) in latest.items():
            try:
                await self.client.upsert(table_name, payload)
            except Exception as e:
                await self._record_failure(event_id, table_name, e)
                continue

            async with get_session(self.session_factory) as session:
                await sync_event_crud.mark_delivered(session, event_id)
            delivered += 1

        await self.purge()
        return delivered

    async def purge(self) -> int:
        """
        Remove delivered and parked events past their retention.

        Returns:
            int: Number of events deleted
        """
        now = utcnow()
        async with get_session(self.session_factory) as session:
            removed = await sync_event_crud.purge(
                session,
                SyncEventStatus.DELIVERED,
                now - timedelta(seconds=self.delivered_retention_seconds),
            )
            removed += await sync_event_crud.purge(
                session,
                SyncEventStatus.FAILED,
                now - timedelta(seconds=self.failed_retention_seconds),
            )
        if removed:
            logger.debug("Purged settled outbox events", extra={"count": removed})
        return removed

    async def _record_failure(self, event_id: str, table_name: str, error: Exception) -> None:
        message = str(error) or type(error).__name__
        async with get_session(self.session_factory) as session:
            event = await sync_event_crud.mark_failed_attempt(
                session, event_id, message, self.max_attempts
            )
        logger.warning(
            f"Mirror sync failed: {message}",
            extra={
                "event_id": event_id,
                "table": table_name,
                "attempts": event.attempts if event else None,
            },
        )
