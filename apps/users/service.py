from typing import Optional
from sqlalchemy.exc import IntegrityError
from framework.authorization import (
    ResourceOwner,
    require_role,
    require_tenant_match,
    user_fields_editable,
)
from framework.exceptions.handler import AuthorizationError, ConflictError, NotFoundError
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork
from framework.security import Identity, ROLE_TENANT_ADMIN, hash_password
from apps.identity.models import User, utcnow
from apps.identity.repository import TenantRepository, UserRepository
from apps.identity.schemas import user_profile
from apps.projects.repository import ProjectRepository
from apps.tasks.repository import TaskRepository

logger = get_logger("user_service")


def _owner(user: User) -> ResourceOwner:
    return ResourceOwner(tenant_id=user.tenant_id, user_id=user.id)


class UserService:
    """Tenant-scoped user management."""

    def __init__(self, uow: UnitOfWork, identity: Identity):
        self.uow = uow
        self.identity = identity
        self.tenants: TenantRepository = uow.get_repository(TenantRepository)
        self.users: UserRepository = uow.get_repository(UserRepository)
        self.projects: ProjectRepository = uow.get_repository(ProjectRepository)
        self.tasks: TaskRepository = uow.get_repository(TaskRepository)

    async def _load(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def create_user(self, tenant_id: str, email: str, password: str, full_name: str, role: str) -> User:
        """Add a user to the tenant while the tenant is below max_users."""
        require_role(self.identity, [ROLE_TENANT_ADMIN])
        require_tenant_match(self.identity, tenant_id)

        tenant = await self.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        # Best-effort quota: concurrent creations may overshoot briefly
        if await self.users.count_by_tenant(tenant.id) >= tenant.max_users:
            raise AuthorizationError("Subscription limit reached")
        if await self.users.get_by_tenant_and_email(tenant.id, email):
            raise ConflictError("Email already exists in this tenant")

        user = User(
            tenant_id=tenant.id,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            role=role,
            is_active=True,
        )
        try:
            async with self.uow.transaction():
                await self.users.create(user)
        except IntegrityError:
            raise ConflictError("Email already exists in this tenant")

        logger.info(f"User {user.id} created in tenant {tenant.id} by {self.identity.user_id}")
        return user

    async def list_users(
        self,
        tenant_id: str,
        page: int,
        limit: int,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        require_tenant_match(self.identity, tenant_id)
        rows, total = await self.users.list_by_tenant(tenant_id, page, limit, role=role, search=search)
        return {
            "users": [user_profile(u) for u in rows],
            "total": total,
        }

    async def update_user(self, user_id: str, fields: dict) -> dict:
        """
        Apply the requested fields the caller may edit; the rest are ignored.
        Nothing applicable left means the caller is not authorized.
        """
        user = await self._load(user_id)
        require_tenant_match(self.identity, user.tenant_id)

        allowed = user_fields_editable(self.identity, _owner(user))
        applicable = {k: v for k, v in fields.items() if k in allowed}
        if not applicable:
            raise AuthorizationError("Not authorized")

        async with self.uow.transaction():
            for key, value in applicable.items():
                setattr(user, key, value)
            user.updated_at = utcnow()
            await self.users.update(user)

        ignored = sorted(set(fields) - set(applicable))
        if ignored:
            logger.info(f"User update by {self.identity.user_id} ignored fields {ignored}")
        return {
            "id": user.id,
            "tenantId": user.tenant_id,
            "fullName": user.full_name,
            "role": user.role,
            "isActive": user.is_active,
            "updatedAt": user.updated_at.isoformat(),
        }

    async def delete_user(self, user_id: str) -> User:
        """Unassign the user's tasks and delete the user in one transaction."""
        require_role(self.identity, [ROLE_TENANT_ADMIN])
        user = await self._load(user_id)
        require_tenant_match(self.identity, user.tenant_id)
        if user.id == self.identity.user_id:
            raise AuthorizationError("Cannot delete self")
        if await self.projects.count_by_creator(user.id):
            raise ConflictError("User still owns projects")

        async with self.uow.transaction():
            await self.tasks.unassign_user(user.id)
            await self.users.delete(user.id)

        logger.info(f"User {user.id} deleted from tenant {user.tenant_id} by {self.identity.user_id}")
        return user
