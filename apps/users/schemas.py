from typing import Literal, Optional
from pydantic import EmailStr, Field
from framework.response import CamelSchema

AssignableRole = Literal["user", "tenant_admin"]


class UserCreateSchema(CamelSchema):
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1, max_length=255)
    role: AssignableRole = "user"


class UserUpdateSchema(CamelSchema):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[AssignableRole] = None
    is_active: Optional[bool] = None

    def supplied(self) -> dict:
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }
