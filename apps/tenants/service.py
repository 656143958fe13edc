from typing import Iterable, Optional
from sqlalchemy.exc import IntegrityError
from framework.authorization import can_update_tenant, require_role, require_tenant_match
from framework.exceptions.handler import AuthorizationError, ConflictError, NotFoundError, ValidationError
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork
from framework.security import Identity, ROLE_SUPER_ADMIN
from apps.identity.models import Tenant, TenantStatus, plan_quotas, utcnow
from apps.identity.repository import TenantRepository, UserRepository
from apps.identity.schemas import tenant_summary
from apps.projects.repository import ProjectRepository
from apps.tasks.repository import TaskRepository

logger = get_logger("tenant_service")


class TenantService:
    """Tenant reads and mutations; registration lives in IdentityService."""

    def __init__(self, uow: UnitOfWork, identity: Identity):
        self.uow = uow
        self.identity = identity
        self.tenants: TenantRepository = uow.get_repository(TenantRepository)
        self.users: UserRepository = uow.get_repository(UserRepository)
        self.projects: ProjectRepository = uow.get_repository(ProjectRepository)
        self.tasks: TaskRepository = uow.get_repository(TaskRepository)

    async def _load(self, tenant_id: str) -> Tenant:
        tenant = await self.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    async def get_tenant(self, tenant_id: str) -> dict:
        require_tenant_match(self.identity, tenant_id, "Unauthorized access")
        tenant = await self._load(tenant_id)
        data = tenant_summary(tenant)
        data["stats"] = {
            "totalUsers": await self.users.count_by_tenant(tenant.id),
            "totalProjects": await self.projects.count_by_tenant(tenant.id),
            "totalTasks": await self.tasks.count_by_tenant(tenant.id),
        }
        return data

    async def update_tenant(self, tenant_id: str, fields: dict, requested: Optional[Iterable[str]] = None) -> dict:
        """
        Apply a partial update.

        name: tenant_admin of the tenant or super_admin. status, subscription_plan,
        max_users, max_projects: super_admin only, and one of them from anyone else
        rejects the whole request, even when sent as null. `requested` names every
        key the caller sent; it defaults to the keys of `fields`.
        """
        require_tenant_match(self.identity, tenant_id)
        if requested is None:
            requested = fields.keys()
        if not can_update_tenant(self.identity, tenant_id, requested):
            raise AuthorizationError("Forbidden")
        tenant = await self._load(tenant_id)
        if not fields:
            raise ValidationError("No fields to update")

        async with self.uow.transaction():
            for key, value in fields.items():
                setattr(tenant, key, value)
            tenant.updated_at = utcnow()
            await self.tenants.update(tenant)

        logger.info(f"Tenant {tenant.id} updated fields {sorted(fields)} by {self.identity.user_id}")
        return {"id": tenant.id, "name": tenant.name, "updatedAt": tenant.updated_at.isoformat()}

    async def list_tenants(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        subscription_plan: Optional[str] = None,
    ) -> dict:
        require_role(self.identity, [ROLE_SUPER_ADMIN])
        rows, total = await self.tenants.list_filtered(page, limit, status, subscription_plan)
        tenants = []
        for tenant in rows:
            tenants.append({
                "id": tenant.id,
                "name": tenant.name,
                "subdomain": tenant.subdomain,
                "status": tenant.status,
                "subscriptionPlan": tenant.subscription_plan,
                "totalUsers": await self.users.count_by_tenant(tenant.id),
                "totalProjects": await self.projects.count_by_tenant(tenant.id),
                "createdAt": tenant.created_at.isoformat(),
            })
        return {
            "tenants": tenants,
            "pagination": {
                "currentPage": page,
                "totalPages": -(-total // limit),
                "totalTenants": total,
                "limit": limit,
            },
        }

    async def create_tenant(self, name: str, subdomain: str, subscription_plan: str) -> Tenant:
        """Operator-provisioned tenant without users; quotas follow the plan."""
        require_role(self.identity, [ROLE_SUPER_ADMIN])
        try:
            async with self.uow.transaction():
                if await self.tenants.get_by_subdomain(subdomain):
                    raise ConflictError("Subdomain already exists")
                tenant = Tenant(
                    name=name,
                    subdomain=subdomain,
                    status=TenantStatus.ACTIVE.value,
                    subscription_plan=subscription_plan,
                    **plan_quotas(subscription_plan),
                )
                await self.tenants.create(tenant)
        except IntegrityError:
            raise ConflictError("Subdomain already exists")
        logger.info(f"Tenant {subdomain} created by super admin {self.identity.user_id}")
        return tenant
