"""Process lifecycle state carried on app.state.context instead of a module global."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from fastapi import Request
from framework.audit import AuditRecorder
from framework.database.manager import DatabaseManager


class LifecycleState(str, Enum):
    STARTING = "starting"
    READY = "ready"
    FAILED = "failed"


@dataclass
class AppContext:
    db: DatabaseManager
    audit: AuditRecorder
    state: LifecycleState = LifecycleState.STARTING
    failure: Optional[str] = None

    def mark_ready(self) -> None:
        self.state = LifecycleState.READY
        self.failure = None

    def mark_failed(self, reason: str) -> None:
        self.state = LifecycleState.FAILED
        self.failure = reason

    @property
    def is_ready(self) -> bool:
        return self.state is LifecycleState.READY


def get_app_context(request: Request) -> AppContext:
    """Dependency: the context installed by the lifespan handler (or by tests)."""
    return request.app.state.context


def get_audit_recorder(request: Request) -> AuditRecorder:
    return get_app_context(request).audit
