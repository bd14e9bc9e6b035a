"""
Stage handlers for the file pipeline.

text_extract turns an uploaded file into text and chains an ai_analyze job;
ai_analyze turns that text into a knowledge-base entry. Handlers run inside
the worker's transaction and never retry: any exception propagates to the
worker, which rolls the transaction back and records the failure.

Dependencies: backend.boundary.db, backend.core.ingestion, backend.core.ai
System role: Per-kind job execution
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD import file_crud, job_crud, kb_entry_crud
from backend.boundary.db.models import FileModel, FileStatus, JobKind, JobModel
from backend.core.ai.analyzer import AIAnalyzer
from backend.core.ingestion.text_extractor import TextExtractor
from backend.core.queue.exceptions import FileNotFoundForJobError, MissingExtractedTextError
from backend.core.queue.metadata import FileJobMetadata

logger = logging.getLogger(__name__)


async def _load_file(
    session: AsyncSession,
    job: JobModel,
    metadata: FileJobMetadata,
) -> FileModel:
    file = await file_crud.get_for_tenant(session, job.tenant_id, metadata.file_id)
    if file is None:
        raise FileNotFoundForJobError(metadata.file_id, job_id=job.id)
    return file


class TextExtractHandler:
    """
    Extract text from an uploaded file and queue its analysis.

    On success the file is EXTRACTED with its text stored and a new
    ai_analyze job exists for it. On failure the file is marked FAILED.
    """

    kind = JobKind.TEXT_EXTRACT.value
    metadata_model = FileJobMetadata

    def __init__(
        self,
        extractor: TextExtractor,
        next_priority: int = 100,
        next_max_attempts: int = 3,
    ) -> None:
        """
        Initialize handler.

        Args:
            extractor: Extraction collaborator
            next_priority: Priority of the chained ai_analyze job
            next_max_attempts: Attempt ceiling of the chained job
        """
        self.extractor = extractor
        self.next_priority = next_priority
        self.next_max_attempts = next_max_attempts

    async def handle(
        self,
        session: AsyncSession,
        job: JobModel,
        metadata: FileJobMetadata,
    ) -> dict[str, Any]:
        file = await _load_file(session, job, metadata)

        text = await self.extractor.extract(file.upload_path, file.mime_type)
        await file_crud.update_status(
            session,
            job.tenant_id,
            file.id,
            FileStatus.EXTRACTED,
            extracted_text=text,
        )

        next_job = await job_crud.create(
            session,
            tenant_id=job.tenant_id,
            kind=JobKind.AI_ANALYZE.value,
            metadata={"file_id": file.id},
            priority=self.next_priority,
            max_attempts=self.next_max_attempts,
        )
        logger.info(
            f"{__name__}:TextExtractHandler - Extracted {len(text)} chars",
            extra={"job_id": job.id, "file_id": file.id, "next_job_id": next_job.id},
        )
        return {"success": True, "next_job_id": next_job.id}

    async def on_failure(
        self,
        session: AsyncSession,
        tenant_id: str,
        metadata: FileJobMetadata,
        error: Exception,
    ) -> None:
        await file_crud.update_status(session, tenant_id, metadata.file_id, FileStatus.FAILED)


class AIAnalyzeHandler:
    """
    Analyze a file's extracted text and store the knowledge-base entry.

    On success exactly one entry exists for the file and the file is
    ANALYZED. On failure the file stays EXTRACTED so the stuck-file sweeper
    can queue another analysis.
    """

    kind = JobKind.AI_ANALYZE.value
    metadata_model = FileJobMetadata

    def __init__(self, analyzer: AIAnalyzer) -> None:
        self.analyzer = analyzer

    async def handle(
        self,
        session: AsyncSession,
        job: JobModel,
        metadata: FileJobMetadata,
    ) -> dict[str, Any]:
        file = await _load_file(session, job, metadata)
        if not file.extracted_text:
            raise MissingExtractedTextError(file.id, job_id=job.id)

        existing = await kb_entry_crud.get_by_file(session, job.tenant_id, file.id)
        if existing is not None:
            # Already analyzed by an earlier job for the same file
            await file_crud.update_status(session, job.tenant_id, file.id, FileStatus.ANALYZED)
            return {"success": True, "kb_entry_id": existing.id}

        analysis = await self.analyzer.analyze(file.extracted_text, file.original_name)

        entry = await kb_entry_crud.create(
            session,
            tenant_id=job.tenant_id,
            file_id=file.id,
            title=analysis.title,
            summary=analysis.summary,
            category=analysis.category,
            tags=analysis.tags,
            entry_metadata={
                "original_filename": file.original_name,
                "mime_type": file.mime_type,
            },
        )
        await file_crud.update_status(session, job.tenant_id, file.id, FileStatus.ANALYZED)

        logger.info(
            f"{__name__}:AIAnalyzeHandler - Created knowledge-base entry",
            extra={"job_id": job.id, "file_id": file.id, "kb_entry_id": entry.id},
        )
        return {"success": True, "kb_entry_id": entry.id}

    async def on_failure(
        self,
        session: AsyncSession,
        tenant_id: str,
        metadata: FileJobMetadata,
        error: Exception,
    ) -> None:
        logger.info(
            f"{__name__}:AIAnalyzeHandler - Analysis failed, file left extracted",
            extra={"tenant_id": tenant_id, "file_id": metadata.file_id, "error": str(error)},
        )
