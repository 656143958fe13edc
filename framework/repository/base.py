"""
Repository abstract base class and generic implementation.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, List, Type, Any, Tuple
from sqlalchemy import delete as sa_delete
from sqlmodel import SQLModel, select, func
from sqlmodel.ext.asyncio.session import AsyncSession

T = TypeVar("T", bound=SQLModel)


class IRepository(ABC, Generic[T]):
    """Repository interface; defines standard data access API."""

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[T]:
        """Get entity by ID."""

    @abstractmethod
    async def create(self, entity: T) -> T:
        """Create entity."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Update entity."""

    @abstractmethod
    async def delete(self, id: str) -> bool:
        """Delete entity."""


class BaseRepository(IRepository[T]):
    """Generic repository implementation with SQLModel CRUD; subclasses add custom queries."""

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    def _filtered(self, statement, filters: dict):
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise AttributeError(f"{self.model.__name__} has no column {key!r}")
            column = getattr(self.model, key)
            statement = statement.where(column.is_(None) if value is None else column == value)
        return statement

    async def get_by_id(self, id: str) -> Optional[T]:
        return await self.session.get(self.model, id)

    async def create(self, entity: T) -> T:
        self.session.add(entity)
        return entity

    async def update(self, entity: T) -> T:
        """Update entity (SQLModel tracks changes)."""
        self.session.add(entity)
        return entity

    async def delete(self, id: str) -> bool:
        entity = await self.get_by_id(id)
        if entity:
            await self.session.delete(entity)
            return True
        return False

    async def delete_where(self, **filters) -> int:
        """Bulk delete rows matching filters; returns affected row count."""
        statement = self._filtered(sa_delete(self.model), filters)
        result = await self.session.exec(statement)
        return result.rowcount

    async def find_one(self, **filters) -> Optional[T]:
        """Find one entity by filters (e.g. email='a@b.c'); None matches IS NULL."""
        result = await self.session.exec(self._filtered(select(self.model), filters))
        return result.first()

    async def find_all(self, **filters) -> List[T]:
        result = await self.session.exec(self._filtered(select(self.model), filters))
        return list(result.all())

    async def exists(self, **filters) -> bool:
        result = await self.session.exec(self._filtered(select(self.model), filters).limit(1))
        return result.first() is not None

    async def count(self, **filters) -> int:
        statement = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.session.exec(statement)
        return result.one()

    async def paginate(self, statement, page: int, limit: int) -> Tuple[List[Any], int]:
        """Run a select for one page and the unpaginated total."""
        count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
        total = (await self.session.exec(count_statement)).one()
        rows = await self.session.exec(statement.limit(limit).offset((page - 1) * limit))
        return list(rows.all()), total
