from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class ResponseModel(BaseModel):
    # "success" on the wire; the name is taken by the helper below
    ok: bool = Field(True, alias="success")
    message: Optional[str] = None
    data: Optional[Any] = None

    @staticmethod
    def success(data: Any = None, message: Optional[str] = None):
        body = {"success": True}
        if message:
            body["message"] = message
        if data is not None:
            body["data"] = data
        return body

    @staticmethod
    def fail(message: str = "error", data: Any = None):
        body = {"success": False, "message": message}
        if data is not None:
            body["data"] = data
        return body


class CamelSchema(BaseModel):
    """Request/response schema: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
