from typing import Any, Optional
from pydantic import Field
from framework.response import CamelSchema
from .dates import UNSET


class TaskCreateSchema(CamelSchema):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: str = "medium"
    due_date: Any = None


class TaskStatusSchema(CamelSchema):
    status: str = Field(min_length=1)


class TaskUpdateSchema(CamelSchema):
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Any = None

    def sent(self, name: str) -> Any:
        """Value of a field, or UNSET when the request did not include it."""
        return getattr(self, name) if name in self.model_fields_set else UNSET
