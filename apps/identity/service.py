from datetime import timedelta
from typing import Optional
from sqlalchemy.exc import IntegrityError
from framework.config import settings
from framework.exceptions.handler import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork
from framework.security import (
    Identity,
    create_access_token,
    hash_password,
    token_lifetime,
    verify_password,
)
from .models import Tenant, TenantStatus, SubscriptionPlan, User, UserRole, plan_quotas
from .repository import TenantRepository, UserRepository
from .schemas import tenant_summary, user_profile

logger = get_logger("identity_service")


class IdentityService:
    """Tenant registration, login and current-identity lookups."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.tenants: TenantRepository = uow.get_repository(TenantRepository)
        self.users: UserRepository = uow.get_repository(UserRepository)

    async def register_tenant(
        self,
        tenant_name: str,
        subdomain: str,
        admin_email: str,
        admin_password: str,
        admin_full_name: str,
    ):
        """
        Create a tenant on the free plan together with its first tenant_admin.

        Runs as one transaction: a conflict at any step leaves neither row behind.
        Returns (tenant, admin_user).
        """
        try:
            async with self.uow.transaction():
                if await self.tenants.get_by_subdomain(subdomain):
                    raise ConflictError("Subdomain already exists")

                plan = SubscriptionPlan.FREE.value
                tenant = Tenant(
                    name=tenant_name,
                    subdomain=subdomain,
                    status=TenantStatus.ACTIVE.value,
                    subscription_plan=plan,
                    **plan_quotas(plan),
                )
                await self.tenants.create(tenant)
                await self.uow.flush()

                if await self.users.get_by_tenant_and_email(tenant.id, admin_email):
                    raise ConflictError("Email already exists in tenant")

                admin = User(
                    tenant_id=tenant.id,
                    email=admin_email,
                    password_hash=hash_password(admin_password),
                    full_name=admin_full_name,
                    role=UserRole.TENANT_ADMIN.value,
                    is_active=True,
                )
                await self.users.create(admin)
        except IntegrityError as e:
            # Concurrent registration won the unique index between check and insert
            logger.warning(f"Registration for subdomain {subdomain} hit a unique constraint: {e.orig}")
            raise ConflictError("Subdomain already exists")

        logger.info(f"Tenant {subdomain} registered with admin {admin_email}")
        return tenant, admin

    async def resolve_login_tenant(self, tenant_subdomain: Optional[str], tenant_id: Optional[str]) -> Tenant:
        if tenant_subdomain:
            tenant = await self.tenants.get_by_subdomain(tenant_subdomain)
        elif tenant_id:
            tenant = await self.tenants.get_by_id(tenant_id)
        else:
            raise ValidationError("Tenant identifier required")
        if tenant is None:
            raise NotFoundError("Tenant not found")
        if tenant.status != TenantStatus.ACTIVE.value:
            raise AuthorizationError("Account suspended/inactive")
        return tenant

    async def login(
        self,
        email: str,
        password: str,
        tenant_subdomain: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ) -> dict:
        """
        Global super_admin first, then the tenant-scoped user.

        Returns the signed token, its lifetime in seconds and the sanitized profile.
        """
        user = await self.users.get_super_admin_by_email(email)
        if user is None:
            tenant = await self.resolve_login_tenant(tenant_subdomain, tenant_id)
            user = await self.users.get_by_tenant_and_email(tenant.id, email)
            if user is None:
                raise AuthenticationError("Invalid credentials")

        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthorizationError("Account suspended/inactive")

        identity = Identity(user_id=user.id, tenant_id=user.tenant_id, role=user.role)
        lifetime: timedelta = token_lifetime()
        token = create_access_token(identity, expires_delta=lifetime)

        logger.info(f"User {user.id} logged in (tenant={user.tenant_id}, role={user.role})")
        profile = user_profile(user)
        profile.pop("createdAt")
        return {
            "user": profile,
            "token": token,
            "expiresIn": int(lifetime.total_seconds()),
        }

    async def current_profile(self, identity: Identity) -> dict:
        user = await self.users.get_by_id(identity.user_id)
        if user is None:
            raise NotFoundError("User not found")

        tenant = await self.tenants.get_by_id(user.tenant_id) if user.tenant_id else None
        profile = user_profile(user)
        profile["tenant"] = None
        if tenant is not None:
            summary = tenant_summary(tenant)
            profile["tenant"] = {
                key: summary[key]
                for key in ("id", "name", "subdomain", "subscriptionPlan", "maxUsers", "maxProjects")
            }
        return profile

    async def ensure_super_admin(self, email: str, password: str, full_name: str) -> User:
        """Create the global super_admin if absent (bootstrap seed)."""
        existing = await self.users.get_super_admin_by_email(email)
        if existing:
            return existing
        user = User(
            tenant_id=None,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            role=UserRole.SUPER_ADMIN.value,
            is_active=True,
        )
        await self.users.create(user)
        logger.info(f"Seeded super admin {email}")
        return user
