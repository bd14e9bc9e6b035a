"""
Base CRUD operations for SQLAlchemy models.

Provides generic create and lookup operations plus tenant-scoped helpers
that can be inherited and extended by model-specific CRUD classes.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Provides standard database operations that work with any SQLAlchemy model.
    Tenant-scoped helpers require the model to carry a tenant_id column; a row
    belonging to another tenant is reported exactly like a missing row.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record in the database.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: str) -> ModelT | None:
        """
        Retrieve a single record by primary key, ignoring tenancy.

        Args:
            session: Async database session
            id: Primary key

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: str,
        id: str,
    ) -> ModelT | None:
        """
        Retrieve a record by primary key within one tenant partition.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            id: Primary key

        Returns:
            Model instance if found for this tenant, None otherwise
        """
        stmt = select(self.model).where(
            self.model.tenant_id == tenant_id,
            self.model.id == id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_for_tenant(self, session: AsyncSession, tenant_id: str) -> int:
        """
        Count the records owned by one tenant.

        Args:
            session: Async database session
            tenant_id: Owning tenant

        Returns:
            int: Number of rows in the tenant partition
        """
        stmt = select(func.count()).select_from(self.model).where(self.model.tenant_id == tenant_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def update_for_tenant(
        self,
        session: AsyncSession,
        tenant_id: str,
        id: str,
        **kwargs,
    ) -> ModelT | None:
        """
        Update a tenant-owned record by primary key.

        Args:
            session: Async database session
            tenant_id: Owning tenant
            id: Primary key
            **kwargs: Fields to update with new values

        Returns:
            Updated model instance if found, None otherwise
        """
        stmt = (
            update(self.model)
            .where(self.model.tenant_id == tenant_id, self.model.id == id)
            .values(**kwargs)
            .returning(self.model)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
