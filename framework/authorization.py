"""
Authorization policy: pure allow/deny decisions over an Identity and the ownership
of the row being touched.

Every tenant-scoped row carries its own tenant_id. Callers load the row first and
pass its ownership here; path parameters are never trusted as the tenant claim.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Set
from framework.exceptions.handler import AuthorizationError
from framework.security import Identity, ROLE_SUPER_ADMIN, ROLE_TENANT_ADMIN

TENANT_NAME_FIELDS = frozenset({"name"})
TENANT_PRIVILEGED_FIELDS = frozenset({"status", "subscription_plan", "max_users", "max_projects"})

USER_PROFILE_FIELDS = frozenset({"full_name"})
USER_ADMIN_FIELDS = frozenset({"role", "is_active"})


@dataclass(frozen=True)
class ResourceOwner:
    """Ownership descriptor of a loaded row."""
    tenant_id: Optional[str]
    created_by: Optional[str] = None
    user_id: Optional[str] = None  # set when the row is itself a user


def is_super_admin(identity: Identity) -> bool:
    return identity.role == ROLE_SUPER_ADMIN


def is_tenant_admin(identity: Identity) -> bool:
    return identity.role == ROLE_TENANT_ADMIN


def tenant_match(identity: Identity, resource_tenant_id: Optional[str]) -> bool:
    """Core isolation predicate: same tenant, or platform operator."""
    if is_super_admin(identity):
        return True
    return identity.tenant_id is not None and identity.tenant_id == resource_tenant_id


def role_allowed(identity: Identity, allowed_roles: Iterable[str]) -> bool:
    return identity.role in set(allowed_roles)


def can_mutate_project(identity: Identity, project: ResourceOwner) -> bool:
    """Tenant admins may change any project of their tenant, others only their own."""
    if is_super_admin(identity):
        return False
    if not tenant_match(identity, project.tenant_id):
        return False
    return is_tenant_admin(identity) or identity.user_id == project.created_by


def user_fields_editable(identity: Identity, target: ResourceOwner) -> Set[str]:
    """Fields of target user the caller may change; empty when tenants differ."""
    if not tenant_match(identity, target.tenant_id):
        return set()
    editable: Set[str] = set()
    if identity.user_id == target.user_id or is_tenant_admin(identity) or is_super_admin(identity):
        editable |= USER_PROFILE_FIELDS
    if is_tenant_admin(identity):
        editable |= USER_ADMIN_FIELDS
    return editable


def can_mutate_user(identity: Identity, target: ResourceOwner, requested_fields: Iterable[str]) -> bool:
    requested = set(requested_fields)
    return bool(requested) and requested <= user_fields_editable(identity, target)


def tenant_fields_editable(identity: Identity, tenant_id: str) -> Set[str]:
    if is_super_admin(identity):
        return set(TENANT_NAME_FIELDS | TENANT_PRIVILEGED_FIELDS)
    if is_tenant_admin(identity) and tenant_match(identity, tenant_id):
        return set(TENANT_NAME_FIELDS)
    return set()


def can_update_tenant(identity: Identity, tenant_id: str, requested_fields: Iterable[str]) -> bool:
    """All-or-nothing: one privileged field from a non-super_admin denies the whole request."""
    requested = set(requested_fields)
    return requested <= tenant_fields_editable(identity, tenant_id)


# --- Enforcement helpers (raise instead of returning a decision) ---

def require_role(identity: Identity, allowed_roles: Iterable[str]) -> None:
    if not role_allowed(identity, allowed_roles):
        raise AuthorizationError("Forbidden")


def require_tenant_match(identity: Identity, resource_tenant_id: Optional[str], message: str = "Forbidden") -> None:
    if not tenant_match(identity, resource_tenant_id):
        raise AuthorizationError(message)


def require_tenant_participant(identity: Identity) -> None:
    """Projects and tasks belong to tenant members; the platform operator is excluded."""
    if is_super_admin(identity) or identity.tenant_id is None:
        raise AuthorizationError("Forbidden")


def require_project_mutation(identity: Identity, project: ResourceOwner) -> None:
    require_tenant_participant(identity)
    require_tenant_match(identity, project.tenant_id)
    if not can_mutate_project(identity, project):
        raise AuthorizationError("Not authorized")
