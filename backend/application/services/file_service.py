"""
File service orchestrator.

Stores uploaded bytes on disk, registers the file and queues its
text_extract job in one transaction.

Dependencies: backend.boundary.db.CRUD, backend.configs
System role: Upload use case orchestration
"""

import asyncio
import logging
from pathlib import Path, PurePath
from typing import Sequence
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import file_crud, job_crud, tenant_crud
from backend.boundary.db.models import FileModel, FileStatus, JobKind, JobModel
from backend.configs import QueueSettings, StorageSettings
from backend.core.exceptions import FileRecordNotFoundError, UploadTooLargeError, ValidationError

logger = logging.getLogger(__name__)


class FileService:
    """File service orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageSettings,
        queue: QueueSettings,
    ) -> None:
        """
        Initialize file service.

        Args:
            db: AsyncSession for database operations
            storage: Upload directory and size limit
            queue: Defaults for the queued text_extract job
        """
        self.db = db
        self.storage = storage
        self.queue = queue

    async def upload(
        self,
        tenant_id: str,
        original_name: str,
        mime_type: str | None,
        content: bytes,
    ) -> tuple[FileModel, JobModel]:
        """
        Store an upload and queue text extraction.

        Args:
            tenant_id: Uploading tenant (registered on first upload)
            original_name: Client filename
            mime_type: Client content type
            content: File bytes

        Returns:
            tuple: (FileModel in UPLOADED state, queued text_extract JobModel)

        Raises:
            ValidationError: If no filename was supplied
            UploadTooLargeError: If content exceeds the size limit
        """
        if not original_name:
            raise ValidationError("No file uploaded", field="file")
        if len(content) > self.storage.max_upload_bytes:
            raise UploadTooLargeError(len(content), self.storage.max_upload_bytes)

        filename = f"{uuid4()}{PurePath(original_name).suffix}"
        upload_path = Path(self.storage.upload_dir) / filename
        await asyncio.to_thread(self._write_bytes, upload_path, content)

        try:
            await tenant_crud.ensure(self.db, tenant_id)
            file = await file_crud.create(
                self.db,
                tenant_id=tenant_id,
                filename=filename,
                original_name=original_name,
                mime_type=mime_type or "application/octet-stream",
                size=len(content),
                upload_path=str(upload_path),
                status=FileStatus.UPLOADED,
            )
            job = await job_crud.create(
                self.db,
                tenant_id=tenant_id,
                kind=JobKind.TEXT_EXTRACT.value,
                metadata={"file_id": file.id},
                priority=self.queue.default_priority,
                max_attempts=self.queue.default_max_attempts,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            upload_path.unlink(missing_ok=True)
            raise

        logger.info(
            f"{__name__}:upload - Stored {original_name}",
            extra={"tenant_id": tenant_id, "file_id": file.id, "job_id": job.id, "size": len(content)},
        )
        return file, job

    @staticmethod
    def _write_bytes(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def list_files(self, tenant_id: str) -> Sequence[FileModel]:
        return await file_crud.list_for_tenant(self.db, tenant_id)

    async def get_file(self, tenant_id: str, file_id: str) -> FileModel:
        """
        Get file by ID.

        Raises:
            FileRecordNotFoundError: If the tenant has no such file
        """
        file = await file_crud.get_for_tenant(self.db, tenant_id, file_id)
        if file is None:
            raise FileRecordNotFoundError(file_id)
        return file
