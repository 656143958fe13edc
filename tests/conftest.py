"""Test config and shared fixtures."""
import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from dataclasses import dataclass
from typing import AsyncGenerator, List, Optional
from httpx import ASGITransport, AsyncClient
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from main import app
from framework.audit import AuditEntry, AuditRecorder
from framework.database.manager import DatabaseManager
from framework.database.sql_driver import SQLDriver
from framework.dependencies import get_db
from framework.lifecycle import AppContext
from framework.security import Identity, create_access_token, hash_password
from apps.identity.models import Tenant, User, plan_quotas


# In-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "S3cret-pass"


@dataclass
class Member:
    """Plain snapshot of a seeded user; safe to read after any rollback."""
    id: str
    tenant_id: Optional[str]
    email: str
    role: str
    password: str = PASSWORD

    @property
    def headers(self) -> dict:
        token = create_access_token(Identity(user_id=self.id, tenant_id=self.tenant_id, role=self.role))
        return {"Authorization": f"Bearer {token}"}


class MemoryAuditSink:
    """Audit writer that keeps entries in a list."""

    def __init__(self):
        self.entries: List[AuditEntry] = []

    async def __call__(self, entry: AuditEntry) -> None:
        self.entries.append(entry)

    def actions(self) -> List[str]:
        return [entry.action for entry in self.entries]


async def add_tenant(session: AsyncSession, subdomain: str, **overrides) -> str:
    fields = {"name": subdomain.title(), "subdomain": subdomain, **plan_quotas("free")}
    fields.update(overrides)
    tenant = Tenant(**fields)
    session.add(tenant)
    await session.commit()
    return tenant.id


async def add_member(
    session: AsyncSession,
    tenant_id: Optional[str],
    role: str = "user",
    email: Optional[str] = None,
    full_name: str = "Test User",
    is_active: bool = True,
) -> Member:
    user = User(
        tenant_id=tenant_id,
        email=email or f"{role}.{os.urandom(3).hex()}@members.com",
        password_hash=hash_password(PASSWORD),
        full_name=full_name,
        role=role,
        is_active=is_active,
    )
    session.add(user)
    await session.commit()
    return Member(id=user.id, tenant_id=user.tenant_id, email=user.email, role=user.role)


@pytest.fixture
async def db_driver() -> AsyncGenerator[SQLDriver, None]:
    """Fresh in-memory database per test."""
    import apps.models  # noqa: F401

    driver = SQLDriver(TEST_DATABASE_URL)
    async with driver.engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield driver
    await driver.disconnect()


@pytest.fixture
async def async_session(db_driver: SQLDriver) -> AsyncGenerator[AsyncSession, None]:
    """Create async test database session."""
    async with db_driver.session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def audit_sink() -> MemoryAuditSink:
    return MemoryAuditSink()


@pytest.fixture
async def app_context(db_driver: SQLDriver, audit_sink: MemoryAuditSink) -> AsyncGenerator[AppContext, None]:
    """Ready application context; the lifespan does not run under ASGITransport."""
    recorder = AuditRecorder(audit_sink, maxsize=100)
    recorder.start()
    context = AppContext(db=DatabaseManager(driver=db_driver), audit=recorder)
    context.mark_ready()
    app.state.context = context
    yield context
    await recorder.stop(timeout=1)


@pytest.fixture
async def client(
    async_session: AsyncSession,
    app_context: AppContext,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    async def _get_db():
        yield async_session

    app.dependency_overrides[get_db] = _get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_tenant(async_session: AsyncSession):
    """Factory: make_tenant(subdomain, **columns) -> tenant id."""
    async def _make(subdomain: str, **overrides) -> str:
        return await add_tenant(async_session, subdomain, **overrides)
    return _make


@pytest.fixture
def make_member(async_session: AsyncSession):
    """Factory: make_member(tenant_id, role=..., email=..., ...) -> Member."""
    async def _make(tenant_id: Optional[str], **kwargs) -> Member:
        return await add_member(async_session, tenant_id, **kwargs)
    return _make


@pytest.fixture
async def tenant_a(async_session: AsyncSession) -> str:
    return await add_tenant(async_session, "acme")


@pytest.fixture
async def tenant_b(async_session: AsyncSession) -> str:
    return await add_tenant(async_session, "globex")


@pytest.fixture
async def admin_a(async_session: AsyncSession, tenant_a: str) -> Member:
    return await add_member(async_session, tenant_a, role="tenant_admin", email="admin@acme.com", full_name="Ada Admin")


@pytest.fixture
async def member_a(async_session: AsyncSession, tenant_a: str) -> Member:
    return await add_member(async_session, tenant_a, role="user", email="bob@acme.com", full_name="Bob Builder")


@pytest.fixture
async def admin_b(async_session: AsyncSession, tenant_b: str) -> Member:
    return await add_member(async_session, tenant_b, role="tenant_admin", email="admin@globex.com", full_name="Gil Globex")


@pytest.fixture
async def member_b(async_session: AsyncSession, tenant_b: str) -> Member:
    return await add_member(async_session, tenant_b, role="user", email="carol@globex.com", full_name="Carol")


@pytest.fixture
async def super_admin(async_session: AsyncSession) -> Member:
    return await add_member(async_session, None, role="super_admin", email="root@platform.com", full_name="Root")
