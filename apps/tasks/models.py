from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from typing import Optional
from datetime import datetime, date
from enum import Enum
from ..identity.models import new_id, utcnow


class TaskStatus(str, Enum):
    """Task status; any status may replace any other."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


TASK_STATUSES = {s.value for s in TaskStatus}
TASK_PRIORITIES = {p.value for p in TaskPriority}


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    project_id: str = Field(foreign_key="projects.id", index=True, max_length=36)
    # Copy of the owning project's tenant, kept for isolation checks without a join
    tenant_id: str = Field(foreign_key="tenants.id", index=True, max_length=36)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    status: str = Field(default=TaskStatus.TODO.value, max_length=20)
    priority: str = Field(default=TaskPriority.MEDIUM.value, max_length=20)
    assigned_to: Optional[str] = Field(default=None, foreign_key="users.id", index=True, max_length=36)
    due_date: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
