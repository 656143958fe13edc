"""
Repository and unit of work test cases.
"""
import pytest
from sqlalchemy import text
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.repository import UnitOfWork
from apps.identity.models import Tenant, User
from apps.identity.repository import TenantRepository, UserRepository


async def test_database_session(async_session: AsyncSession):
    """Test that database session works."""
    result = await async_session.exec(text("SELECT 1"))
    assert result.scalar() == 1


class TestUnitOfWork:

    async def test_repository_cached_per_unit(self, async_session: AsyncSession):
        uow = UnitOfWork(session=async_session)
        assert uow.get_repository(TenantRepository) is uow.get_repository(TenantRepository)

    def test_session_required(self):
        with pytest.raises(ValueError):
            UnitOfWork()

    async def test_transaction_commits(self, async_session: AsyncSession):
        uow = UnitOfWork(session=async_session)
        async with uow.transaction():
            await uow.get_repository(TenantRepository).create(Tenant(name="Acme", subdomain="acme"))

        assert await uow.get_repository(TenantRepository).get_by_subdomain("acme") is not None

    async def test_transaction_rolls_back_every_write(self, async_session: AsyncSession):
        uow = UnitOfWork(session=async_session)
        tenants = uow.get_repository(TenantRepository)

        with pytest.raises(RuntimeError):
            async with uow.transaction():
                tenant = Tenant(name="Acme", subdomain="acme")
                await tenants.create(tenant)
                await uow.flush()
                await uow.get_repository(UserRepository).create(User(
                    tenant_id=tenant.id, email="a@acme.com", password_hash="x", full_name="A",
                ))
                await uow.flush()
                raise RuntimeError("second step failed")

        assert (await async_session.exec(select(Tenant))).all() == []
        assert (await async_session.exec(select(User))).all() == []


class TestBaseRepository:

    async def test_none_filter_matches_null(self, async_session: AsyncSession, tenant_a, super_admin, admin_a):
        users = UserRepository(async_session)
        assert (await users.find_one(tenant_id=None)).id == super_admin.id
        assert await users.count(tenant_id=tenant_a) == 1

    async def test_unknown_filter_column(self, async_session: AsyncSession):
        with pytest.raises(AttributeError):
            await TenantRepository(async_session).find_one(colour="blue")

    async def test_paginate_reports_total(self, async_session: AsyncSession, make_tenant):
        for name in ("a", "b", "c"):
            await make_tenant(f"tenant-{name}")

        rows, total = await TenantRepository(async_session).list_filtered(page=2, limit=2)
        assert total == 3
        assert len(rows) == 1

    async def test_delete_where(self, async_session: AsyncSession, tenant_a, admin_a, member_a):
        removed = await UserRepository(async_session).delete_where(tenant_id=tenant_a, role="user")
        assert removed == 1
        assert await UserRepository(async_session).count(tenant_id=tenant_a) == 1
