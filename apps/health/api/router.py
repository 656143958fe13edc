from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from framework.config import settings
from framework.lifecycle import AppContext, LifecycleState, get_app_context
from framework.response import ResponseModel

router = APIRouter()


@router.get("/health")
async def health(context: AppContext = Depends(get_app_context)):
    """Readiness: 500 when the database is down, 503 until startup has completed."""
    if not await context.db.sql.ping():
        return JSONResponse(status_code=500, content={"status": "error", "database": "disconnected"})
    if context.state is not LifecycleState.READY:
        status = "initializing" if context.state is LifecycleState.STARTING else context.state.value
        return JSONResponse(status_code=503, content={"status": status, "database": "connected"})
    return {"status": "ok", "database": "connected"}


@router.get("")
async def api_root():
    return ResponseModel.success(data={"version": settings.APP_VERSION})
