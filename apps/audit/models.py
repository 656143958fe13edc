from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from ..identity.models import new_id, utcnow

# Written once after bootstrap seeding; the only audit row business code reads
SEED_COMPLETED = "SEED_COMPLETED"


class AuditLog(SQLModel, table=True):
    """Append-only action record."""
    __tablename__ = "audit_logs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    tenant_id: Optional[str] = Field(default=None, index=True, max_length=36)
    user_id: Optional[str] = Field(default=None, max_length=36)
    action: str = Field(max_length=64, index=True)
    entity_type: Optional[str] = Field(default=None, max_length=32)
    entity_id: Optional[str] = Field(default=None, max_length=64)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    created_at: datetime = Field(default_factory=utcnow)
