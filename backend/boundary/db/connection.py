"""
Database connection management.

Provides async SQLAlchemy engine, session factory, a transactional session
context manager for the background loops, and the FastAPI dependency for
request-scoped sessions.

Dependencies: sqlalchemy, backend.configs
System role: Database connection lifecycle management
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.boundary.db.base import Base
from backend.configs import get_settings


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    PostgreSQL gets a sized pool with pool_pre_ping=True to detect stale
    connections early. SQLite (local runs) uses the driver defaults.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    settings = get_settings()
    db_config = settings.database

    if db_config.is_sqlite:
        return create_async_engine(
            db_config.async_database_url,
            echo=db_config.echo_sql,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    Returns async_sessionmaker bound to the engine with autoflush=False and
    expire_on_commit=False for explicit transaction control.

    Returns:
        async_sessionmaker: Async session factory configured for manual transaction control

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


@asynccontextmanager
async def get_session(
    session_factory: async_sessionmaker[AsyncSession],
    read_only: bool = False,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Open a session that commits on success and rolls back on any error.

    Args:
        session_factory: Factory producing the session
        read_only: Skip the commit (queries only)

    Yields:
        AsyncSession: Session scoped to the with-block
    """
    async with session_factory() as session:
        try:
            yield session
            if not read_only:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create every registered table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection with automatic cleanup.

    Creates a new async database session for each request and commits it when
    the route returns without raising; rolls back otherwise.

    Yields:
        AsyncSession: Async SQLAlchemy database session (scoped to request lifetime)

    Raises:
        SQLAlchemyError: Propagated from database operations

    Usage:
        from fastapi import Depends

        @router.get("/jobs/{job_id}")
        async def get_job(job_id: str, db: AsyncSession = Depends(get_async_db)):
            return await job_crud.get_for_tenant(db, tenant_id, job_id)
    """
    async with get_session(get_async_session_factory()) as session:
        yield session
