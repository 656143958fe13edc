from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from framework.dependencies import AuditTrail, PageParams, get_audit_trail, get_uow, page_params
from framework.repository.unit_of_work import UnitOfWork
from framework.response import ResponseModel
from framework.security import Identity, get_current_identity
from ..models import ProjectStatus
from ..schemas import ProjectCreateSchema, ProjectUpdateSchema
from ..service import ProjectService, project_view

router = APIRouter()


def get_project_service(
    uow: UnitOfWork = Depends(get_uow),
    identity: Identity = Depends(get_current_identity),
) -> ProjectService:
    """Dependency: create ProjectService (rejects super_admin)."""
    return ProjectService(uow, identity)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreateSchema,
    service: ProjectService = Depends(get_project_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    project = await service.create_project(data.name, data.description, data.status.value)
    audit.log("CREATE_PROJECT", identity=service.identity, tenant_id=project.tenant_id, entity_type="project", entity_id=project.id)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=ResponseModel.success(data=project_view(project)))


@router.get("")
async def list_projects(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    paging: PageParams = Depends(page_params(default_limit=20)),
    service: ProjectService = Depends(get_project_service),
):
    """Tenant projects, newest first, with task counts and creator."""
    data = await service.list_projects(
        paging.page,
        paging.limit,
        status=status_filter.value if status_filter else None,
        search=search,
    )
    data["pagination"] = paging.meta(data["total"])
    return ResponseModel.success(data=data)


@router.get("/{project_id}")
async def get_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    project = await service.get_project(project_id)
    return ResponseModel.success(data=project_view(project))


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    data: ProjectUpdateSchema,
    service: ProjectService = Depends(get_project_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    project = await service.update_project(project_id, data.supplied())
    audit.log("UPDATE_PROJECT", identity=service.identity, tenant_id=project.tenant_id, entity_type="project", entity_id=project.id)
    return ResponseModel.success(data=project_view(project), message="Project updated successfully")


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    project = await service.delete_project(project_id)
    audit.log("DELETE_PROJECT", identity=service.identity, tenant_id=project.tenant_id, entity_type="project", entity_id=project_id)
    return ResponseModel.success(message="Project deleted successfully")
