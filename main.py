from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from framework.bootstrap import lifespan
from framework.config import settings
from framework.middleware.logging_md import LoggingMiddleware
from framework.logging.logger import LogConfig
from framework.exceptions.handler import BusinessException, global_exception_handler
from apps.health.api.router import router as health_router
from apps.identity.api.router import router as identity_router
from apps.tenants.api.router import router as tenant_router
from apps.users.api.router import router as user_router
from apps.projects.api.router import router as project_router
from apps.tasks.api.router import router as task_router

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Initialize logging configuration
LogConfig.setup_logging(to_files=settings.APP_ENV != "testing")

# Register global exception handlers
app.add_exception_handler(BusinessException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(SQLAlchemyError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers under API_PREFIX
prefix = settings.API_PREFIX
app.include_router(health_router, prefix=prefix, tags=["Health"])
app.include_router(identity_router, prefix=f"{prefix}/auth", tags=["Auth"])
app.include_router(tenant_router, prefix=f"{prefix}/tenants", tags=["Tenants"])
app.include_router(user_router, prefix=f"{prefix}/users", tags=["Users"])
app.include_router(project_router, prefix=f"{prefix}/projects", tags=["Projects"])
app.include_router(task_router, prefix=f"{prefix}/tasks", tags=["Tasks"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
