"""
Test suite for the mirror outbox drainer and the PostgREST client.

System role: Verification of asynchronous mirror delivery
"""

import json

import httpx
import pytest
from tenacity import wait_none

from backend.boundary.db.CRUD import job_crud, sync_event_crud
from backend.boundary.db.models import JobStatus, SyncEventStatus
from backend.boundary.mirror import MirrorClient
from backend.configs import MirrorSettings
from backend.core.sync import MirrorSyncDrainer


class RecordingSink:
    """Mirror double that records upserts, optionally failing every call."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.rows: list[tuple[str, dict]] = []

    async def upsert(self, table: str, row: dict) -> None:
        if self.error is not None:
            raise self.error
        self.rows.append((table, row))


class FlakySink(RecordingSink):
    """Mirror double whose first calls fail, then keeps the latest row per id."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.mirror: dict[tuple[str, str], dict] = {}

    async def upsert(self, table: str, row: dict) -> None:
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("mirror unavailable")
        self.rows.append((table, row))
        self.mirror[(table, row["id"])] = row


async def _count(session_factory, status: SyncEventStatus) -> int:
    async with session_factory() as session:
        return await sync_event_crud.count_by_status(session, status)


class TestMirrorSyncDrainer:
    """Test suite for MirrorSyncDrainer.tick()."""

    @pytest.mark.asyncio
    async def test_tick_should_deliver_pending_events_in_order(
        self,
        session_factory,
        make_file,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            file = await make_file(session)
            await session.commit()
        sink = RecordingSink()

        # Act
        delivered = await MirrorSyncDrainer(session_factory, sink).tick()

        # Assert
        assert delivered == 1
        assert sink.rows[0][0] == "files"
        assert sink.rows[0][1]["id"] == file.id
        assert sink.rows[0][1]["status"] == "uploaded"
        assert await _count(session_factory, SyncEventStatus.PENDING) == 0
        assert await _count(session_factory, SyncEventStatus.DELIVERED) == 1

    @pytest.mark.asyncio
    async def test_failed_delivery_should_stay_pending_until_ceiling(
        self,
        session_factory,
        make_file,
    ) -> None:
        """Failures are counted on the event and never raised."""
        # Arrange
        async with session_factory() as session:
            await make_file(session)
            await session.commit()
        drainer = MirrorSyncDrainer(
            session_factory, RecordingSink(error=RuntimeError("503")), max_attempts=2
        )

        # Act
        first = await drainer.tick()
        pending_after_first = await _count(session_factory, SyncEventStatus.PENDING)
        second = await drainer.tick()

        # Assert
        assert (first, second) == (0, 0)
        assert pending_after_first == 1
        assert await _count(session_factory, SyncEventStatus.PENDING) == 0
        assert await _count(session_factory, SyncEventStatus.FAILED) == 1

    @pytest.mark.asyncio
    async def test_tick_should_respect_batch_size(
        self,
        session_factory,
        make_file,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            for _ in range(3):
                await make_file(session)
            await session.commit()
        sink = RecordingSink()

        # Act
        delivered = await MirrorSyncDrainer(session_factory, sink, batch_size=2).tick()

        # Assert
        assert delivered == 2
        assert await _count(session_factory, SyncEventStatus.PENDING) == 1

    @pytest.mark.asyncio
    async def test_failed_old_snapshot_should_not_overwrite_newer_one(
        self,
        session_factory,
    ) -> None:
        """A job queued then canceled ends canceled in the mirror despite a failed delivery."""
        # Arrange
        async with session_factory() as session:
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="text_extract", metadata={"file_id": "f"}
            )
            await session.commit()
        sink = FlakySink(failures=1)
        drainer = MirrorSyncDrainer(session_factory, sink)

        # Act
        await drainer.tick()
        async with session_factory() as session:
            await job_crud.update_status(session, "tenant-a", job.id, JobStatus.CANCELED)
            await session.commit()
        await drainer.tick()
        await drainer.tick()

        # Assert
        assert sink.mirror[("jobs", job.id)]["status"] == "canceled"
        assert [row["status"] for _, row in sink.rows] == ["canceled"]
        assert await _count(session_factory, SyncEventStatus.PENDING) == 0

    @pytest.mark.asyncio
    async def test_tick_should_deliver_only_latest_snapshot_per_record(
        self,
        session_factory,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            job = await job_crud.create(
                session, tenant_id="tenant-a", kind="text_extract", metadata={"file_id": "f"}
            )
            await job_crud.update_status(session, "tenant-a", job.id, JobStatus.RUNNING)
            await job_crud.update_status(session, "tenant-a", job.id, JobStatus.SUCCEEDED)
            await session.commit()
        sink = RecordingSink()

        # Act
        delivered = await MirrorSyncDrainer(session_factory, sink).tick()

        # Assert
        assert delivered == 1
        assert [row["status"] for _, row in sink.rows] == ["succeeded"]
        assert await _count(session_factory, SyncEventStatus.PENDING) == 0
        assert await _count(session_factory, SyncEventStatus.DELIVERED) == 1

    @pytest.mark.asyncio
    async def test_tick_should_purge_settled_events_past_retention(
        self,
        session_factory,
        make_file,
    ) -> None:
        # Arrange
        async with session_factory() as session:
            await make_file(session)
            await make_file(session)
            await session.commit()
        await MirrorSyncDrainer(
            session_factory, RecordingSink(error=RuntimeError("503")), max_attempts=1, batch_size=1
        ).tick()
        drainer = MirrorSyncDrainer(session_factory, RecordingSink(), delivered_retention_seconds=0)

        # Act
        delivered = await drainer.tick()

        # Assert
        assert delivered == 1
        assert await _count(session_factory, SyncEventStatus.DELIVERED) == 0
        assert await _count(session_factory, SyncEventStatus.FAILED) == 1


class TestMirrorClient:
    """Test suite for MirrorClient.upsert()."""

    @pytest.mark.asyncio
    async def test_upsert_should_post_row_with_merge_headers(self) -> None:
        # Arrange
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        client = MirrorClient(
            MirrorSettings(url="https://mirror.example.co/", api_key="service-key"),
            transport=httpx.MockTransport(handler),
        )

        # Act
        await client.upsert("jobs", {"id": "job-1", "status": "queued"})

        # Assert
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/v1/jobs"
        assert request.url.params["on_conflict"] == "id"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
        assert "merge-duplicates" in request.headers["prefer"]
        assert json.loads(request.content) == {"id": "job-1", "status": "queued"}

    @pytest.mark.asyncio
    async def test_upsert_should_raise_on_rejected_row(self) -> None:
        # Arrange
        client = MirrorClient(
            MirrorSettings(url="https://mirror.example.co"),
            transport=httpx.MockTransport(lambda request: httpx.Response(400, json={"message": "bad"})),
        )

        # Act / Assert
        with pytest.raises(httpx.HTTPStatusError):
            await client.upsert("files", {"id": "f-1"})

    @pytest.mark.asyncio
    async def test_upsert_should_retry_transport_errors(self) -> None:
        # Arrange
        attempts = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(201)

        client = MirrorClient(
            MirrorSettings(url="https://mirror.example.co"),
            transport=httpx.MockTransport(handler),
        )
        upsert = MirrorClient.upsert.retry_with(wait=wait_none())

        # Act
        await upsert(client, "kb_entries", {"id": "e-1"})

        # Assert
        assert attempts == 3

    def test_client_should_require_url(self) -> None:
        with pytest.raises(ValueError):
            MirrorClient(MirrorSettings(url=None))
