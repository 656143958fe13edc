"""Startup/shutdown sequence run by the FastAPI lifespan."""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from framework.audit import AuditRecorder
from framework.config import settings
from framework.database.manager import DatabaseManager
from framework.lifecycle import AppContext
from framework.logging.logger import get_logger
from framework.repository.unit_of_work import UnitOfWork

logger = get_logger("bootstrap")


async def seed_once(db: DatabaseManager) -> bool:
    """
    Seed the global super admin unless the SEED_COMPLETED sentinel exists.
    Returns True when seeding ran.
    """
    from apps.audit.models import AuditLog, SEED_COMPLETED
    from apps.audit.repository import AuditLogRepository
    from apps.identity.service import IdentityService

    async with db.sql.session_factory() as session:
        uow = UnitOfWork(session=session)
        audit_logs: AuditLogRepository = uow.get_repository(AuditLogRepository)
        if await audit_logs.seed_completed():
            return False

        async with uow.transaction():
            if settings.SEED_SUPER_ADMIN_EMAIL and settings.SEED_SUPER_ADMIN_PASSWORD:
                await IdentityService(uow).ensure_super_admin(
                    settings.SEED_SUPER_ADMIN_EMAIL,
                    settings.SEED_SUPER_ADMIN_PASSWORD,
                    settings.SEED_SUPER_ADMIN_FULL_NAME,
                )
            await audit_logs.create(AuditLog(action=SEED_COMPLETED, entity_type="system", entity_id="seed"))
        logger.info("Seed completed")
        return True


def build_context(db: DatabaseManager) -> AppContext:
    from apps.audit.repository import sql_audit_writer

    recorder = AuditRecorder(sql_audit_writer(db.sql.session_factory), maxsize=settings.AUDIT_QUEUE_SIZE)
    return AppContext(db=db, audit=recorder)


@asynccontextmanager
async def lifespan(app: FastAPI):
    context = build_context(DatabaseManager.get_instance())
    app.state.context = context

    try:
        await context.db.sql.connect()
        if settings.DB_CREATE_TABLES:
            await context.db.sql.create_tables()
        await seed_once(context.db)
        context.audit.start()
        context.mark_ready()
        logger.info(f"{settings.APP_NAME} ready")
    except Exception as e:
        # Keep serving so /health reports the failure
        context.mark_failed(str(e))
        logger.opt(exception=True).error(f"Startup failed: {e}")

    yield

    await context.audit.stop(timeout=settings.AUDIT_DRAIN_TIMEOUT)
    await context.db.sql.disconnect()
    logger.info(f"{settings.APP_NAME} stopped")
