from typing import Any, Optional
from framework.authorization import require_tenant_match, require_tenant_participant
from framework.exceptions.handler import NotFoundError, ValidationError
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork
from framework.security import Identity
from apps.identity.models import User, utcnow
from apps.identity.repository import UserRepository
from apps.projects.models import Project
from apps.projects.repository import ProjectRepository
from .dates import UNSET, normalize_date_only, to_date
from .models import Task, TaskStatus, TASK_PRIORITIES, TASK_STATUSES
from .repository import TaskRepository

logger = get_logger("task_service")


def validate_status(status: Optional[str]) -> Optional[str]:
    if status and status not in TASK_STATUSES:
        raise ValidationError("Invalid status")
    return status


def validate_priority(priority: Optional[str]) -> Optional[str]:
    if priority and priority not in TASK_PRIORITIES:
        raise ValidationError("Invalid priority")
    return priority


def assignee_view(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "fullName": user.full_name, "email": user.email}


def task_view(task: Task, assignee: Any = UNSET) -> dict:
    """Task as returned by the API; assignee expanded when it was loaded."""
    return {
        "id": task.id,
        "projectId": task.project_id,
        "tenantId": task.tenant_id,
        "title": task.title,
        "description": task.description,
        "status": task.status,
        "priority": task.priority,
        "assignedTo": task.assigned_to if assignee is UNSET else assignee_view(assignee),
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "createdAt": task.created_at.isoformat(),
        "updatedAt": task.updated_at.isoformat(),
    }


class TaskService:
    """Task lifecycle; every task lives in a project of the caller's tenant."""

    def __init__(self, uow: UnitOfWork, identity: Identity):
        require_tenant_participant(identity)
        self.uow = uow
        self.identity = identity
        self.users: UserRepository = uow.get_repository(UserRepository)
        self.projects: ProjectRepository = uow.get_repository(ProjectRepository)
        self.tasks: TaskRepository = uow.get_repository(TaskRepository)

    async def _load_project(self, project_id: str, mismatch_message: str = "Forbidden") -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        require_tenant_match(self.identity, project.tenant_id, mismatch_message)
        return project

    async def _load_task(self, task_id: str) -> Task:
        task = await self.tasks.get_by_id(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        require_tenant_match(self.identity, task.tenant_id)
        return task

    async def _assignee_in_tenant(self, user_id: str, tenant_id: str) -> User:
        user = await self.users.get_in_tenant(user_id, tenant_id)
        if user is None:
            raise ValidationError("assignedTo user invalid")
        return user

    async def create_task(
        self,
        project_id: str,
        title: str,
        description: Optional[str] = None,
        assigned_to: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Any = None,
    ) -> Task:
        priority = priority or "medium"
        validate_priority(priority)
        due = normalize_date_only(due_date)

        project = await self._load_project(project_id, "Project does not belong to tenant")
        if assigned_to:
            await self._assignee_in_tenant(assigned_to, project.tenant_id)

        task = Task(
            project_id=project.id,
            tenant_id=project.tenant_id,
            title=title,
            description=description or None,
            status=TaskStatus.TODO.value,
            priority=priority,
            assigned_to=assigned_to or None,
            due_date=to_date(due),
        )
        async with self.uow.transaction():
            await self.tasks.create(task)

        logger.info(f"Task {task.id} created in project {project.id}")
        return task

    async def list_tasks(
        self,
        project_id: str,
        page: int,
        limit: int,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        validate_status(status)
        validate_priority(priority)
        project = await self.projects.get_by_id(project_id)
        if project is None:
            # A deleted project simply has no tasks left
            return {"tasks": [], "total": 0}
        require_tenant_match(self.identity, project.tenant_id)

        rows, total = await self.tasks.list_by_project(
            project.id,
            page,
            limit,
            status=status,
            assigned_to=assigned_to,
            priority=priority,
            search=search,
        )
        tasks = []
        for task, assignee in rows:
            view = task_view(task, assignee)
            tasks.append({key: view[key] for key in (
                "id", "title", "description", "status", "priority", "assignedTo", "dueDate", "createdAt",
            )})
        return {"tasks": tasks, "total": total}

    async def patch_status(self, task_id: str, status: str) -> Task:
        """Any valid status may replace any other; any tenant member may do it."""
        validate_status(status)
        task = await self._load_task(task_id)

        async with self.uow.transaction():
            task.status = status
            task.updated_at = utcnow()
            await self.tasks.update(task)

        logger.info(f"Task {task.id} status -> {status}")
        return task

    async def update_task(
        self,
        task_id: str,
        title: Any = UNSET,
        description: Any = UNSET,
        status: Any = UNSET,
        priority: Any = UNSET,
        assigned_to: Any = UNSET,
        due_date: Any = UNSET,
    ):
        """
        Partial update. Returns (task, assignee user or None).

        title/status/priority apply when given a non-empty value; description,
        assignedTo and dueDate apply whenever sent, null or "" clearing them.
        """
        if status is not UNSET:
            validate_status(status)
        if priority is not UNSET:
            validate_priority(priority)
        due = normalize_date_only(due_date)

        task = await self._load_task(task_id)

        assignee = None
        if assigned_to is not UNSET and assigned_to:
            assignee = await self._assignee_in_tenant(assigned_to, task.tenant_id)

        changes = {}
        if title is not UNSET and title:
            changes["title"] = title
        if description is not UNSET:
            changes["description"] = description or None
        if status is not UNSET and status:
            changes["status"] = status
        if priority is not UNSET and priority:
            changes["priority"] = priority
        if assigned_to is not UNSET:
            changes["assigned_to"] = assigned_to or None
        if due is not UNSET:
            changes["due_date"] = to_date(due)
        if not changes:
            raise ValidationError("No fields to update")

        async with self.uow.transaction():
            for key, value in changes.items():
                setattr(task, key, value)
            task.updated_at = utcnow()
            await self.tasks.update(task)

        if assignee is None and task.assigned_to:
            assignee = await self.users.get_by_id(task.assigned_to)

        logger.info(f"Task {task.id} updated fields {sorted(changes)}")
        return task, assignee
