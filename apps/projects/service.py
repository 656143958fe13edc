from typing import Optional
from framework.authorization import (
    ResourceOwner,
    require_project_mutation,
    require_tenant_match,
    require_tenant_participant,
)
from framework.exceptions.handler import AuthorizationError, NotFoundError, ValidationError
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork
from framework.security import Identity
from apps.identity.models import utcnow
from apps.identity.repository import TenantRepository
from apps.tasks.repository import TaskRepository
from .models import Project
from .repository import ProjectRepository

logger = get_logger("project_service")


def project_owner(project: Project) -> ResourceOwner:
    return ResourceOwner(tenant_id=project.tenant_id, created_by=project.created_by)


def project_view(project: Project) -> dict:
    return {
        "id": project.id,
        "tenantId": project.tenant_id,
        "name": project.name,
        "description": project.description,
        "status": project.status,
        "createdBy": project.created_by,
        "createdAt": project.created_at.isoformat(),
        "updatedAt": project.updated_at.isoformat(),
    }


class ProjectService:
    """Project lifecycle inside the caller's tenant."""

    def __init__(self, uow: UnitOfWork, identity: Identity):
        require_tenant_participant(identity)
        self.uow = uow
        self.identity = identity
        self.tenants: TenantRepository = uow.get_repository(TenantRepository)
        self.projects: ProjectRepository = uow.get_repository(ProjectRepository)
        self.tasks: TaskRepository = uow.get_repository(TaskRepository)

    async def load_project(self, project_id: str) -> Project:
        """Project by id; callers check tenant and ownership against the loaded row."""
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def create_project(self, name: str, description: Optional[str], status: str) -> Project:
        tenant = await self.tenants.get_by_id(self.identity.tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        # Best-effort quota: check-then-insert without a lock
        if await self.projects.count_by_tenant(tenant.id) >= tenant.max_projects:
            raise AuthorizationError("Project limit reached")

        project = Project(
            tenant_id=tenant.id,
            name=name,
            description=description or None,
            status=status,
            created_by=self.identity.user_id,
        )
        async with self.uow.transaction():
            await self.projects.create(project)

        logger.info(f"Project {project.id} created in tenant {tenant.id} by {self.identity.user_id}")
        return project

    async def list_projects(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        rows, total = await self.projects.list_with_stats(
            self.identity.tenant_id, page, limit, status=status, search=search
        )
        projects = [
            {
                "id": project.id,
                "name": project.name,
                "description": project.description,
                "status": project.status,
                "createdBy": {"id": project.created_by, "fullName": creator_name},
                "taskCount": task_count,
                "completedTaskCount": completed_count,
                "createdAt": project.created_at.isoformat(),
            }
            for project, creator_name, task_count, completed_count in rows
        ]
        return {"projects": projects, "total": total}

    async def get_project(self, project_id: str) -> Project:
        project = await self.load_project(project_id)
        require_tenant_match(self.identity, project.tenant_id)
        return project

    async def update_project(self, project_id: str, fields: dict) -> Project:
        project = await self.load_project(project_id)
        require_project_mutation(self.identity, project_owner(project))
        if not fields:
            raise ValidationError("No fields to update")

        async with self.uow.transaction():
            for key, value in fields.items():
                setattr(project, key, value)
            project.updated_at = utcnow()
            await self.projects.update(project)

        logger.info(f"Project {project.id} updated fields {sorted(fields)}")
        return project

    async def delete_project(self, project_id: str) -> Project:
        """Delete child tasks, then the project, as one atomic unit."""
        project = await self.load_project(project_id)
        require_project_mutation(self.identity, project_owner(project))

        async with self.uow.transaction():
            removed = await self.tasks.delete_by_project(project.id)
            await self.projects.delete(project.id)

        logger.info(f"Project {project.id} deleted with {removed} task(s)")
        return project
