import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def http_error_from_service(err: ServiceError) -> HTTPException:
    headers = None
    if isinstance(err, UnauthenticatedError):
        status = 401
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(err, NotFoundError):
        status = 404
    elif isinstance(err, PermissionDeniedError):
        status = 403
    elif isinstance(err, ConflictError):
        status = 409
    elif isinstance(err, ValidationError):
        status = 422
    else:
        status = 500

    return HTTPException(
        status_code=status,
        detail={"code": err.code, "message": err.message},
        headers=headers,
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures that escape a service (typically on reads) become STORAGE_FAILURE."""
    logger.error("storage_failure", path=request.url.path, error=str(exc))
    http_err = http_error_from_service(
        StorageError(ErrorCode.STORAGE_FAILURE.value, "storage unavailable")
    )
    return JSONResponse(status_code=http_err.status_code, content={"detail": http_err.detail})
