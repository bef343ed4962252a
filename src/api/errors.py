"""Error mapper: domain errors to fixed HTTP status codes and bodies."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import (
    DomainError,
    DuplicateError,
    NotFoundError,
    PermissionDeniedError,
    PresentationCycleError,
    RouteNotFound,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Looked up along the exception's MRO, so subclasses inherit their parent's status
ERROR_STATUS: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateError: status.HTTP_409_CONFLICT,
    PresentationCycleError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    DomainError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def map_error(exc: BaseException) -> tuple[int, dict]:
    """Return (status code, body) for any exception.

    5xx bodies carry a fixed message; the real error only goes to the log.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, DomainError):
        status_code = next(ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in ERROR_STATUS)

    if status_code >= 500:
        logger.error(
            "Unhandled error",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"errorType": type(exc).__name__},
        )
        return status_code, {"error": INTERNAL_ERROR_MESSAGE}

    body = {"error": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        body["errors"] = exc.errors
    return status_code, body


def error_response(exc: BaseException) -> JSONResponse:
    status_code, body = map_error(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(content=body, status_code=status_code, headers=headers)


async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return error_response(exc)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return error_response(RouteNotFound(f"No route for {request.method} {request.url.path}"))
    if exc.status_code >= 500:
        return error_response(exc)
    return JSONResponse(content={"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err['msg']}" for err in exc.errors()]
    return error_response(ValidationError(errors))


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(exc)


def install_error_handlers(app: FastAPI):
    """Register the mapper for errors raised outside the versioned pipeline."""
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
