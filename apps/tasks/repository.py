"""Task module repository implementation."""

from typing import Optional, List, Tuple, Any
from sqlalchemy import case, update
from sqlmodel import func, select
from framework.repository.base import BaseRepository
from ..identity.models import User
from .models import Task, TaskPriority


# high first, then medium, everything else (low, urgent) last
PRIORITY_RANK = case(
    (Task.priority == TaskPriority.HIGH.value, 1),
    (Task.priority == TaskPriority.MEDIUM.value, 2),
    else_=3,
)
DUE_DATE_NULLS_LAST = case((Task.due_date.is_(None), 1), else_=0)


class TaskRepository(BaseRepository[Task]):
    """Task repository."""

    def __init__(self, session):
        super().__init__(session, Task)

    async def count_by_tenant(self, tenant_id: str) -> int:
        return await self.count(tenant_id=tenant_id)

    async def delete_by_project(self, project_id: str) -> int:
        return await self.delete_where(project_id=project_id)

    async def unassign_user(self, user_id: str) -> int:
        """Clear assigned_to on every task pointing at user_id."""
        statement = update(Task).where(Task.assigned_to == user_id).values(assigned_to=None)
        result = await self.session.exec(statement)
        return result.rowcount

    async def list_by_project(
        self,
        project_id: str,
        page: int,
        limit: int,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Any], int]:
        """
        Tasks of one project ordered by priority rank, then due date ascending with
        undated tasks last.

        Returns rows of (Task, assignee User or None) and the unpaginated total.
        """
        statement = (
            select(Task, User)
            .outerjoin(User, User.id == Task.assigned_to)
            .where(Task.project_id == project_id)
        )
        if status:
            statement = statement.where(Task.status == status)
        if assigned_to:
            statement = statement.where(Task.assigned_to == assigned_to)
        if priority:
            statement = statement.where(Task.priority == priority)
        if search:
            statement = statement.where(func.lower(Task.title).like(f"%{search.lower()}%"))

        statement = statement.order_by(
            PRIORITY_RANK.asc(),
            DUE_DATE_NULLS_LAST.asc(),
            Task.due_date.asc(),
            Task.created_at.asc(),
        )
        return await self.paginate(statement, page, limit)
