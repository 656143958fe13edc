"""Audit log persistence: the append path and the seed sentinel lookup."""

from framework.audit import AuditEntry
from framework.repository.base import BaseRepository
from .models import AuditLog, SEED_COMPLETED


class AuditLogRepository(BaseRepository[AuditLog]):

    def __init__(self, session):
        super().__init__(session, AuditLog)

    async def append(self, entry: AuditEntry) -> AuditLog:
        row = AuditLog(
            tenant_id=entry.tenant_id,
            user_id=entry.user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            ip_address=entry.ip_address,
            created_at=entry.created_at,
        )
        return await self.create(row)

    async def seed_completed(self) -> bool:
        return await self.exists(action=SEED_COMPLETED)


def sql_audit_writer(session_factory):
    """Writer for AuditRecorder: one short session per entry, independent of request sessions."""
    async def write(entry: AuditEntry) -> None:
        async with session_factory() as session:
            await AuditLogRepository(session).append(entry)
            await session.commit()
    return write
