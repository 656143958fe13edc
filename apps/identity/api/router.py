from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from framework.dependencies import AuditTrail, get_audit_trail, get_uow
from framework.repository.unit_of_work import UnitOfWork
from framework.response import ResponseModel
from framework.security import Identity, get_current_identity
from ..schemas import LoginSchema, RegisterTenantSchema
from ..service import IdentityService

router = APIRouter()


def get_identity_service(uow: UnitOfWork = Depends(get_uow)) -> IdentityService:
    """Dependency: create IdentityService."""
    return IdentityService(uow)


@router.post("/register-tenant", status_code=status.HTTP_201_CREATED)
async def register_tenant(
    data: RegisterTenantSchema,
    service: IdentityService = Depends(get_identity_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    """Register a new tenant and its first tenant_admin."""
    tenant, admin = await service.register_tenant(
        tenant_name=data.tenant_name,
        subdomain=data.subdomain,
        admin_email=data.admin_email,
        admin_password=data.admin_password,
        admin_full_name=data.admin_full_name,
    )
    audit.log("REGISTER_TENANT", tenant_id=tenant.id, entity_type="tenant", entity_id=tenant.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ResponseModel.success(
            data={
                "tenantId": tenant.id,
                "subdomain": tenant.subdomain,
                "adminUser": {
                    "id": admin.id,
                    "email": admin.email,
                    "fullName": admin.full_name,
                    "role": admin.role,
                },
            },
            message="Tenant registered successfully",
        ),
    )


@router.post("/login")
async def login(
    data: LoginSchema,
    service: IdentityService = Depends(get_identity_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    """Login: super_admin by email, otherwise tenant user by subdomain or tenant id."""
    result = await service.login(
        email=data.email,
        password=data.password,
        tenant_subdomain=data.tenant_subdomain,
        tenant_id=data.tenant_id,
    )
    user = result["user"]
    audit.log(
        "LOGIN",
        identity=Identity(user_id=user["id"], tenant_id=user["tenantId"], role=user["role"]),
        tenant_id=user["tenantId"],
        entity_type="user",
        entity_id=user["id"],
    )
    return ResponseModel.success(data=result)


@router.get("/me")
async def me(
    identity: Identity = Depends(get_current_identity),
    service: IdentityService = Depends(get_identity_service),
):
    """Current user profile with its tenant."""
    return ResponseModel.success(data=await service.current_profile(identity))


@router.post("/logout")
async def logout(
    identity: Identity = Depends(get_current_identity),
    audit: AuditTrail = Depends(get_audit_trail),
):
    """Tokens are stateless; logout only leaves an audit record."""
    audit.log(
        "LOGOUT",
        identity=identity,
        tenant_id=identity.tenant_id,
        entity_type="user",
        entity_id=identity.user_id,
    )
    return ResponseModel.success(message="Logged out successfully")
