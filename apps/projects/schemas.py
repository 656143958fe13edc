from typing import Optional
from pydantic import Field
from framework.response import CamelSchema
from .models import ProjectStatus


class ProjectCreateSchema(CamelSchema):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE


class ProjectUpdateSchema(CamelSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None

    def supplied(self) -> dict:
        """
        Changed columns. name/status only when non-null; description whenever sent,
        an empty or null description clears it.
        """
        values = {}
        if self.name is not None:
            values["name"] = self.name
        if "description" in self.model_fields_set:
            values["description"] = self.description or None
        if self.status is not None:
            values["status"] = self.status.value
        return values
