"""
Tenant CRUD operations.

Dependencies: sqlalchemy, backend.boundary.db.models
System role: Tenant registry used for dispatcher fan-out
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.boundary.db.CRUD.base_crud import BaseCRUD
from backend.boundary.db.models import TenantModel


class TenantCRUD(BaseCRUD[TenantModel]):
    """CRUD operations for TenantModel."""

    def __init__(self) -> None:
        super().__init__(TenantModel)

    async def list_ids(self, session: AsyncSession) -> list[str]:
        """All registered tenant ids, in registration order."""
        stmt = select(TenantModel.id).order_by(TenantModel.created_at.asc(), TenantModel.id.asc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def ensure(
        self,
        session: AsyncSession,
        tenant_id: str,
        display_name: str | None = None,
    ) -> TenantModel:
        """
        Return the tenant, registering it on first use.

        Args:
            session: Async database session
            tenant_id: Tenant identifier
            display_name: Name stored when the tenant is created

        Returns:
            Existing or newly created TenantModel

        Raises:
            ValueError: If tenant_id is empty
        """
        if not tenant_id:
            raise ValueError("tenant_id is required")

        tenant = await self.get_by_id(session, tenant_id)
        if tenant is not None:
            return tenant
        return await self.create(session, id=tenant_id, display_name=display_name)


tenant_crud = TenantCRUD()
