"""Identity module repository implementations."""

from typing import List, Optional, Tuple
from sqlmodel import select, func, or_
from framework.repository.base import BaseRepository
from framework.security import ROLE_SUPER_ADMIN
from .models import Tenant, User


class TenantRepository(BaseRepository[Tenant]):
    """Tenant repository."""

    def __init__(self, session):
        super().__init__(session, Tenant)

    async def get_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        return await self.find_one(subdomain=subdomain)

    async def list_filtered(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        subscription_plan: Optional[str] = None,
    ) -> Tuple[List[Tenant], int]:
        """Tenants newest first, optional status/plan filters."""
        statement = select(Tenant)
        if status:
            statement = statement.where(Tenant.status == status)
        if subscription_plan:
            statement = statement.where(Tenant.subscription_plan == subscription_plan)
        statement = statement.order_by(Tenant.created_at.desc())
        return await self.paginate(statement, page, limit)


class UserRepository(BaseRepository[User]):
    """User repository."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_super_admin_by_email(self, email: str) -> Optional[User]:
        return await self.find_one(tenant_id=None, role=ROLE_SUPER_ADMIN, email=email)

    async def get_by_tenant_and_email(self, tenant_id: str, email: str) -> Optional[User]:
        return await self.find_one(tenant_id=tenant_id, email=email)

    async def get_in_tenant(self, user_id: str, tenant_id: str) -> Optional[User]:
        """User by id, only when it belongs to tenant_id."""
        return await self.find_one(id=user_id, tenant_id=tenant_id)

    async def count_by_tenant(self, tenant_id: str) -> int:
        return await self.count(tenant_id=tenant_id)

    async def list_by_tenant(
        self,
        tenant_id: str,
        page: int,
        limit: int,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        """Users of one tenant newest first; search matches email or full name, case-insensitive."""
        statement = select(User).where(User.tenant_id == tenant_id)
        if role:
            statement = statement.where(User.role == role)
        if search:
            pattern = f"%{search.lower()}%"
            statement = statement.where(or_(
                func.lower(User.email).like(pattern),
                func.lower(User.full_name).like(pattern),
            ))
        statement = statement.order_by(User.created_at.desc())
        return await self.paginate(statement, page, limit)
