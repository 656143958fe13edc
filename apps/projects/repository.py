"""Project module repository implementation."""

from typing import List, Optional, Tuple, Any
from sqlmodel import select, func
from framework.repository.base import BaseRepository
from ..identity.models import User
from ..tasks.models import Task, TaskStatus
from .models import Project


class ProjectRepository(BaseRepository[Project]):
    """Project repository."""

    def __init__(self, session):
        super().__init__(session, Project)

    async def count_by_tenant(self, tenant_id: str) -> int:
        return await self.count(tenant_id=tenant_id)

    async def count_by_creator(self, user_id: str) -> int:
        return await self.count(created_by=user_id)

    async def list_with_stats(
        self,
        tenant_id: str,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Any], int]:
        """
        Projects of a tenant, newest first, each with creator name and task counts.

        Returns rows of (Project, creator_full_name, task_count, completed_task_count)
        and the unpaginated total.
        """
        task_counts = (
            select(Task.project_id, func.count(Task.id).label("total"))
            .group_by(Task.project_id)
            .subquery()
        )
        done_counts = (
            select(Task.project_id, func.count(Task.id).label("done"))
            .where(Task.status == TaskStatus.DONE.value)
            .group_by(Task.project_id)
            .subquery()
        )

        statement = (
            select(
                Project,
                User.full_name.label("creator_name"),
                func.coalesce(task_counts.c.total, 0).label("task_count"),
                func.coalesce(done_counts.c.done, 0).label("completed_task_count"),
            )
            .join(User, User.id == Project.created_by)
            .outerjoin(task_counts, task_counts.c.project_id == Project.id)
            .outerjoin(done_counts, done_counts.c.project_id == Project.id)
            .where(Project.tenant_id == tenant_id)
        )
        if status:
            statement = statement.where(Project.status == status)
        if search:
            statement = statement.where(func.lower(Project.name).like(f"%{search.lower()}%"))
        statement = statement.order_by(Project.created_at.desc())

        return await self.paginate(statement, page, limit)
