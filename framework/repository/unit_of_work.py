"""
Unit of Work: manages repositories and transaction boundaries.
"""

from contextlib import asynccontextmanager
from typing import Optional
from sqlmodel.ext.asyncio.session import AsyncSession


class UnitOfWork:
    """Manages related repositories with a shared session and transaction commit/rollback."""

    def __init__(self, session: Optional[AsyncSession] = None):
        """Initialize UnitOfWork; session must be provided."""
        if session is None:
            raise ValueError("Session must be provided. Pass the request session explicitly.")

        self.session = session
        self._repositories = {}

    def get_repository(self, repo_class):
        """Get or create a repository instance (cached per unit of work)."""
        cache_key = repo_class.__name__
        if cache_key not in self._repositories:
            self._repositories[cache_key] = repo_class(self.session)
        return self._repositories[cache_key]

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def flush(self) -> None:
        """Flush session (push pending inserts so constraints fire early)."""
        await self.session.flush()

    async def refresh(self, entity) -> None:
        await self.session.refresh(entity)

    @asynccontextmanager
    async def transaction(self):
        """Atomic unit: commit when the block finishes, roll back on any exception."""
        try:
            yield self
        except BaseException:
            await self.rollback()
            raise
        else:
            await self.commit()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            await self.rollback()
        else:
            await self.commit()
