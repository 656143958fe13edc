from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String, UniqueConstraint
from typing import Optional
from datetime import datetime, timezone
from enum import Enum
import uuid


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TenantStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class UserRole(str, Enum):
    USER = "user"
    TENANT_ADMIN = "tenant_admin"
    SUPER_ADMIN = "super_admin"


# Roles a tenant admin may hand out
TENANT_ASSIGNABLE_ROLES = {UserRole.USER.value, UserRole.TENANT_ADMIN.value}


class Tenant(SQLModel, table=True):
    __tablename__ = "tenants"
    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    name: str = Field(max_length=255)
    # Globally unique, used to route logins
    subdomain: str = Field(sa_column=Column(String(63), unique=True, index=True, nullable=False))
    status: str = Field(default=TenantStatus.ACTIVE.value, max_length=20)
    subscription_plan: str = Field(default=SubscriptionPlan.FREE.value, max_length=20)
    max_users: int = Field(default=5)
    max_projects: int = Field(default=3)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class User(SQLModel, table=True):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    # Null only for the global super_admin; never changes after creation
    tenant_id: Optional[str] = Field(default=None, foreign_key="tenants.id", index=True, max_length=36)
    email: str = Field(max_length=255, index=True)
    password_hash: str = Field(max_length=255)
    full_name: str = Field(max_length=255)
    role: str = Field(default=UserRole.USER.value, max_length=20)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# Plan-derived quotas applied when a tenant is created
PLAN_QUOTAS = {
    SubscriptionPlan.FREE.value: {"max_users": 5, "max_projects": 3},
    SubscriptionPlan.PRO.value: {"max_users": 25, "max_projects": 15},
    SubscriptionPlan.ENTERPRISE.value: {"max_users": 100, "max_projects": 50},
}


def plan_quotas(plan: str) -> dict:
    """Quotas for plan; unknown plans get the free tier."""
    return dict(PLAN_QUOTAS.get(plan, PLAN_QUOTAS[SubscriptionPlan.FREE.value]))
