from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from framework.dependencies import AuditTrail, PageParams, get_audit_trail, get_uow, page_params
from framework.repository.unit_of_work import UnitOfWork
from framework.response import ResponseModel
from framework.security import Identity, get_current_identity
from ..schemas import TaskCreateSchema, TaskStatusSchema, TaskUpdateSchema
from ..service import TaskService, task_view

router = APIRouter()


def get_task_service(
    uow: UnitOfWork = Depends(get_uow),
    identity: Identity = Depends(get_current_identity),
) -> TaskService:
    """Dependency: create TaskService (rejects super_admin)."""
    return TaskService(uow, identity)


@router.post("/projects/{project_id}/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    project_id: str,
    data: TaskCreateSchema,
    service: TaskService = Depends(get_task_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    """Create a task in a project; new tasks start as todo."""
    task = await service.create_task(
        project_id,
        title=data.title,
        description=data.description,
        assigned_to=data.assigned_to,
        priority=data.priority,
        due_date=data.due_date,
    )
    audit.log("CREATE_TASK", identity=service.identity, tenant_id=task.tenant_id, entity_type="task", entity_id=task.id)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=ResponseModel.success(data=task_view(task)))


@router.get("/projects/{project_id}/tasks")
async def list_tasks(
    project_id: str,
    status_filter: Optional[str] = Query(None, alias="status"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    priority: Optional[str] = None,
    search: Optional[str] = None,
    paging: PageParams = Depends(page_params(default_limit=50)),
    service: TaskService = Depends(get_task_service),
):
    """Tasks of a project: high priority first, then earliest due date, undated last."""
    data = await service.list_tasks(
        project_id,
        paging.page,
        paging.limit,
        status=status_filter,
        assigned_to=assigned_to,
        priority=priority,
        search=search,
    )
    data["pagination"] = paging.meta(data["total"])
    return ResponseModel.success(data=data)


@router.patch("/{task_id}/status")
async def patch_task_status(
    task_id: str,
    data: TaskStatusSchema,
    service: TaskService = Depends(get_task_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    task = await service.patch_status(task_id, data.status)
    audit.log("UPDATE_TASK_STATUS", identity=service.identity, tenant_id=task.tenant_id, entity_type="task", entity_id=task.id)
    return ResponseModel.success(data={
        "id": task.id,
        "status": task.status,
        "updatedAt": task.updated_at.isoformat(),
    })


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    data: TaskUpdateSchema,
    service: TaskService = Depends(get_task_service),
    audit: AuditTrail = Depends(get_audit_trail),
):
    task, assignee = await service.update_task(
        task_id,
        title=data.sent("title"),
        description=data.sent("description"),
        status=data.sent("status"),
        priority=data.sent("priority"),
        assigned_to=data.sent("assigned_to"),
        due_date=data.sent("due_date"),
    )
    audit.log("UPDATE_TASK", identity=service.identity, tenant_id=task.tenant_id, entity_type="task", entity_id=task.id)
    return ResponseModel.success(data=task_view(task, assignee), message="Task updated successfully")
