from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from framework.dependencies import AuditTrail, PageParams, get_audit_trail, get_uow, page_params
from framework.repository.unit_of_work import UnitOfWork
from framework.response import ResponseModel
from framework.security import Identity, get_current_identity
from apps.identity.models import SubscriptionPlan, TenantStatus
from apps.identity.schemas import tenant_summary
from ..schemas import TenantCreateSchema, TenantUpdateSchema
from ..service import TenantService

router = APIRouter()


def get_tenant_service(
    uow: UnitOfWork = Depends(get_uow),
    identity: Identity = Depends(get_current_identity),
) -> TenantService:
    return TenantService(uow, identity)


@router.get("")
async def list_tenants(
    status_filter: Optional[TenantStatus] = Query(None, alias="status"),
    subscription_plan: Optional[SubscriptionPlan] = Query(None, alias="subscriptionPlan"),
    paging: PageParams = Depends(page_params(default_limit=10)),
    service: TenantService = Depends(get_tenant_service),
):
    """All tenants with user/project totals (super_admin only)."""
    data = await service.list_tenants(
        paging.page,
        paging.limit,
        status=status_filter.value if status_filter else None,
        subscription_plan=subscription_plan.value if subscription_plan else None,
    )
    return ResponseModel.success(data=data)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreateSchema,
    service: TenantService = Depends(get_tenant_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    """Provision a tenant without users (super_admin only)."""
    tenant = await service.create_tenant(data.name, data.subdomain, data.subscription_plan.value)
    audit.log("CREATE_TENANT", identity=service.identity, tenant_id=tenant.id, entity_type="tenant", entity_id=tenant.id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ResponseModel.success(data=tenant_summary(tenant), message="Tenant created successfully"),
    )


@router.get("/{tenant_id}")
async def get_tenant(tenant_id: str, service: TenantService = Depends(get_tenant_service)):
    return ResponseModel.success(data=await service.get_tenant(tenant_id))


@router.put("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    data: TenantUpdateSchema,
    service: TenantService = Depends(get_tenant_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    updated = await service.update_tenant(tenant_id, data.supplied(), data.requested())
    audit.log("UPDATE_TENANT", identity=service.identity, tenant_id=tenant_id, entity_type="tenant", entity_id=tenant_id)
    return ResponseModel.success(data=updated, message="Tenant updated successfully")
