from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, OperationalError, TimeoutError as PoolTimeoutError
from framework.logging.logger import get_logger
from framework.response import ResponseModel
from typing import Any, Optional
from framework.config import settings

logger = get_logger("exception_handler")

class BusinessException(Exception):
    """Base class for business exceptions."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail


class ValidationError(BusinessException):
    """Malformed, missing or out-of-enum input."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(BusinessException):
    """Missing, invalid or expired credential."""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(BusinessException):
    """Authenticated but not permitted (tenant/role mismatch, quota exceeded)."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BusinessException):
    """Resource absent or not visible to the caller."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BusinessException):
    """Uniqueness violation."""
    status_code = status.HTTP_409_CONFLICT


class InternalError(BusinessException):
    """Unexpected storage or logic failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ServiceUnavailableError(BusinessException):
    """Storage did not answer in time; the caller may retry."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


RETRY_AFTER_SECONDS = "5"


def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    trace_id = getattr(request.state, "trace_id", "unknown")

    if isinstance(exc, BusinessException):
        if exc.status_code >= 500:
            logger.error(f"Trace[{trace_id}] - {type(exc).__name__}: {exc.message}")
        else:
            logger.warning(f"Trace[{trace_id}] - {type(exc).__name__}: {exc.message}")
        headers = None
        if isinstance(exc, ServiceUnavailableError):
            headers = {"Retry-After": RETRY_AFTER_SECONDS}
        if isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content=ResponseModel.fail(message=exc.message),
            headers=headers,
        )

    if isinstance(exc, RequestValidationError):
        logger.warning(f"Trace[{trace_id}] - ValidationError: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ResponseModel.fail(
                message="Validation errors",
                data=jsonable_errors(exc) if settings.DEBUG else None
            )
        )

    if isinstance(exc, StarletteHTTPException):
        logger.warning(f"Trace[{trace_id}] - HTTPException {exc.status_code}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ResponseModel.fail(message=str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    if isinstance(exc, SQLAlchemyError):
        logger.critical(f"Trace[{trace_id}] - DatabaseError: {str(exc)}")
        return global_exception_handler(request, translate_storage_error(exc))

    logger.opt(exception=True).error(f"Trace[{trace_id}] - UncaughtException: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ResponseModel.fail(
            message="Internal server error occurred",
            data={"trace_id": trace_id} if settings.DEBUG else None
        )
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Field errors without the raw input/ctx objects (not always JSON-serializable)."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def translate_storage_error(exc: SQLAlchemyError) -> BusinessException:
    """Timeouts and lost connections are retryable; any other storage failure is internal."""
    if isinstance(exc, (PoolTimeoutError, OperationalError)):
        return ServiceUnavailableError("Service temporarily unavailable, please retry")
    return InternalError("Internal error")
