"""
Stage handler registry.

Maps a job kind to the handler that executes it and the pydantic model its
metadata must satisfy. New kinds are added by registering a handler; the
worker itself never changes.

Dependencies: pydantic, sqlalchemy
System role: Kind -> handler dispatch table
"""

from typing import Any, Protocol

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.models import JobModel
from backend.core.queue.exceptions import InvalidJobMetadataError, UnknownJobKindError


class StageHandler(Protocol):
    """Contract every registered handler satisfies."""

    kind: str
    metadata_model: type[BaseModel]

    async def handle(
        self,
        session: AsyncSession,
        job: JobModel,
        metadata: BaseModel,
    ) -> dict[str, Any]:
        """Execute the job inside the caller's transaction and return the run result."""
        ...

    async def on_failure(
        self,
        session: AsyncSession,
        tenant_id: str,
        metadata: BaseModel,
        error: Exception,
    ) -> None:
        """Record kind-specific failure state after the job was marked failed."""
        ...


class HandlerRegistry:
    """In-process table of stage handlers keyed by job kind."""

    def __init__(self, handlers: list[StageHandler] | None = None) -> None:
        self._handlers: dict[str, StageHandler] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: StageHandler) -> None:
        if handler.kind in self._handlers:
            raise ValueError(f"Handler already registered for kind: {handler.kind}")
        self._handlers[handler.kind] = handler

    def get(self, kind: str, job_id: str | None = None) -> StageHandler:
        """
        Resolve the handler for a kind.

        Raises:
            UnknownJobKindError: If nothing is registered for the kind
        """
        handler = self._handlers.get(kind)
        if handler is None:
            raise UnknownJobKindError(kind, job_id=job_id)
        return handler

    def parse_metadata(
        self,
        handler: StageHandler,
        raw: Any,
        job_id: str | None = None,
    ) -> BaseModel:
        """
        Validate raw job metadata for a handler.

        Raises:
            InvalidJobMetadataError: If the metadata does not fit the schema
        """
        if not isinstance(raw, dict):
            raise InvalidJobMetadataError(
                f"Invalid job metadata: expected an object, got {type(raw).__name__}",
                job_id=job_id,
            )
        try:
            return handler.metadata_model.model_validate(raw)
        except ValidationError as e:
            fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in e.errors())
            raise InvalidJobMetadataError(
                f"Invalid job metadata for {handler.kind}: {fields}",
                job_id=job_id,
            ) from e

    def __contains__(self, kind: str) -> bool:
        return kind in self._handlers

    @property
    def kinds(self) -> list[str]:
        return sorted(self._handlers)
