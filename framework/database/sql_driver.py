from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.logging.logger import get_logger
from .base import BaseDatabaseDriver

logger = get_logger("sql_driver")


def engine_options(url: str, connect_timeout: int, pool_timeout: int) -> dict:
    """Bounded waits for the pooled drivers; SQLite has neither knob."""
    if url.startswith("sqlite"):
        if ":memory:" in url:
            # One shared connection, otherwise every session sees an empty database
            return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        return {}
    options = {"pool_timeout": pool_timeout, "pool_pre_ping": True}
    if "aiomysql" in url or "asyncmy" in url:
        options["connect_args"] = {"connect_timeout": connect_timeout}
    elif "asyncpg" in url:
        options["connect_args"] = {"timeout": connect_timeout}
    return options


class SQLDriver(BaseDatabaseDriver):
    def __init__(self, url: str, connect_timeout: int = 5, pool_timeout: int = 10):
        self.url = url
        self.engine = create_async_engine(
            url, echo=False, future=True, **engine_options(url, connect_timeout, pool_timeout)
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def connect(self):
        """Open one connection to fail fast on bad credentials."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

    async def disconnect(self):
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    async def create_tables(self):
        """Create missing tables from the registered SQLModel metadata."""
        import apps.models  # noqa: F401  registers every table
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def get_session(self):
        async with self.session_factory() as session:
            yield session
