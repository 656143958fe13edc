from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from framework.dependencies import AuditTrail, PageParams, get_audit_trail, get_uow, page_params
from framework.repository.unit_of_work import UnitOfWork
from framework.response import ResponseModel
from framework.security import Identity, get_current_identity
from apps.identity.schemas import user_profile
from ..schemas import AssignableRole, UserCreateSchema, UserUpdateSchema
from ..service import UserService

router = APIRouter()


def get_user_service(
    uow: UnitOfWork = Depends(get_uow),
    identity: Identity = Depends(get_current_identity),
) -> UserService:
    return UserService(uow, identity)


@router.post("/{tenant_id}/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    tenant_id: str,
    data: UserCreateSchema,
    service: UserService = Depends(get_user_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    user = await service.create_user(tenant_id, data.email, data.password, data.full_name, data.role)
    audit.log("CREATE_USER", identity=service.identity, tenant_id=tenant_id, entity_type="user", entity_id=user.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ResponseModel.success(data=user_profile(user), message="User created successfully"),
    )


@router.get("/{tenant_id}/users")
async def list_users(
    tenant_id: str,
    search: Optional[str] = None,
    role: Optional[AssignableRole] = None,
    paging: PageParams = Depends(page_params(default_limit=50)),
    service: UserService = Depends(get_user_service),
):
    data = await service.list_users(tenant_id, paging.page, paging.limit, role=role, search=search)
    data["pagination"] = paging.meta(data["total"])
    return ResponseModel.success(data=data)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    data: UserUpdateSchema,
    service: UserService = Depends(get_user_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    updated = await service.update_user(user_id, data.supplied())
    audit.log("UPDATE_USER", identity=service.identity, tenant_id=updated["tenantId"], entity_type="user", entity_id=user_id)
    return ResponseModel.success(data=updated, message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    user = await service.delete_user(user_id)
    audit.log("DELETE_USER", identity=service.identity, tenant_id=user.tenant_id, entity_type="user", entity_id=user_id)
    return ResponseModel.success(message="User deleted successfully")
