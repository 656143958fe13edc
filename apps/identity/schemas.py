"""Identity request bodies and profile views."""

from typing import Optional
from pydantic import EmailStr, Field
from framework.response import CamelSchema
from .models import Tenant, User


class RegisterTenantSchema(CamelSchema):
    tenant_name: str = Field(min_length=1, max_length=255)
    subdomain: str = Field(min_length=1, max_length=63, pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
    admin_email: EmailStr
    admin_password: str = Field(min_length=1)
    admin_full_name: str = Field(min_length=1, max_length=255)


class LoginSchema(CamelSchema):
    email: EmailStr
    password: str = Field(min_length=1)
    tenant_subdomain: Optional[str] = None
    tenant_id: Optional[str] = None


def user_profile(user: User) -> dict:
    """Public view of a user; never carries the password digest."""
    return {
        "id": user.id,
        "email": user.email,
        "fullName": user.full_name,
        "role": user.role,
        "tenantId": user.tenant_id,
        "isActive": user.is_active,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def tenant_summary(tenant: Tenant) -> dict:
    return {
        "id": tenant.id,
        "name": tenant.name,
        "subdomain": tenant.subdomain,
        "status": tenant.status,
        "subscriptionPlan": tenant.subscription_plan,
        "maxUsers": tenant.max_users,
        "maxProjects": tenant.max_projects,
        "createdAt": tenant.created_at.isoformat() if tenant.created_at else None,
    }
