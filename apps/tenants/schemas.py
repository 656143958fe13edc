from typing import Optional
from pydantic import Field
from framework.response import CamelSchema
from apps.identity.models import SubscriptionPlan, TenantStatus


class TenantCreateSchema(CamelSchema):
    name: str = Field(min_length=1, max_length=255)
    subdomain: str = Field(min_length=1, max_length=63, pattern=r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
    subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE


class TenantUpdateSchema(CamelSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[TenantStatus] = None
    subscription_plan: Optional[SubscriptionPlan] = None
    max_users: Optional[int] = Field(default=None, ge=1)
    max_projects: Optional[int] = Field(default=None, ge=1)

    def requested(self) -> set:
        """Every field present in the request, explicit nulls included."""
        return set(self.model_fields_set)

    def supplied(self) -> dict:
        """Fields present in the request with a non-null value, as column values."""
        values = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None:
                continue
            values[name] = value.value if hasattr(value, "value") else value
        return values
