"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: backend.configs, backend.application, backend.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.application.services import FileService, JobService, KbService, StatsService
from backend.boundary.db import get_async_db
from backend.configs import Settings, get_settings
from backend.core.queue.registry import HandlerRegistry


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_tenant_id(
    x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID"),
    settings: Settings = Depends(get_settings_dependency),
) -> str:
    """
    Resolve the requesting tenant.

    Args:
        x_tenant_id: Tenant header set by the auth layer
        settings: Application settings (injected)

    Returns:
        str: Tenant id, or the configured default when the header is absent
    """
    if x_tenant_id and x_tenant_id.strip():
        return x_tenant_id.strip()
    return settings.default_tenant_id


def get_handler_registry(request: Request) -> HandlerRegistry | None:
    """Handler registry built at app creation, if any."""
    return getattr(request.app.state, "registry", None)


def get_job_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
    registry: HandlerRegistry | None = Depends(get_handler_registry),
) -> JobService:
    """
    Get job service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings (injected)
        registry: Registered job kinds (injected)

    Returns:
        JobService: Job service instance
    """
    return JobService(
        db=db,
        settings=settings.queue,
        known_kinds=registry.kinds if registry is not None else None,
    )


def get_file_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> FileService:
    """
    Get file service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings (injected)

    Returns:
        FileService: File service instance
    """
    return FileService(db=db, storage=settings.storage, queue=settings.queue)


def get_kb_service(db: AsyncSession = Depends(get_async_db)) -> KbService:
    """Get knowledge-base service instance."""
    return KbService(db=db)


def get_stats_service(db: AsyncSession = Depends(get_async_db)) -> StatsService:
    """Get stats service instance."""
    return StatsService(db=db)
