"""Shared FastAPI dependencies: database session, unit of work, pagination, audit."""

from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Query, Request
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.audit import AuditEntry, AuditRecorder
from framework.database.manager import DatabaseManager
from framework.lifecycle import get_audit_recorder
from framework.repository.unit_of_work import UnitOfWork
from framework.security import Identity

MAX_PAGE_SIZE = 100


async def get_db():
    manager = DatabaseManager.get_instance()
    async for session in manager.sql.get_session():
        yield session


def get_uow(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    """Dependency: create UnitOfWork."""
    return UnitOfWork(session=db)


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    def meta(self, total: int) -> dict:
        return {
            "currentPage": self.page,
            "totalPages": -(-total // self.limit),
            "limit": self.limit,
        }


def page_params(default_limit: int):
    """Dependency factory: page >= 1, limit >= 1 capped at MAX_PAGE_SIZE."""
    def _params(
        page: int = Query(1, ge=1),
        limit: int = Query(default_limit, ge=1),
    ) -> PageParams:
        return PageParams(page=page, limit=min(limit, MAX_PAGE_SIZE))
    return _params


class AuditTrail:
    """Request-bound helper that stamps caller and client address on audit entries."""

    def __init__(self, recorder: AuditRecorder, ip_address: Optional[str]):
        self.recorder = recorder
        self.ip_address = ip_address

    def log(
        self,
        action: str,
        identity: Optional[Identity] = None,
        tenant_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> bool:
        return self.recorder.record(AuditEntry(
            action=action,
            tenant_id=tenant_id,
            user_id=identity.user_id if identity else None,
            entity_type=entity_type,
            entity_id=entity_id,
            ip_address=self.ip_address,
        ))


def get_audit_trail(request: Request, recorder: AuditRecorder = Depends(get_audit_recorder)) -> AuditTrail:
    return AuditTrail(recorder, request.client.host if request.client else None)
