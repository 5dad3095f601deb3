"""Application error taxonomy and the FastAPI handlers that render it.

Every error is returned as ``{"detail": <message>, "code": <CODE>}``.
Store failures are logged with their traceback and reported with a generic
message so driver text never reaches the client.
"""

from enum import Enum
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from hrdesk.core.logging import logger


class ErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INVALID = "INVALID"
    TRANSIENT = "TRANSIENT"


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ErrorCode.TRANSIENT
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, errors: Optional[list[Any]] = None):
        self.detail = detail or self.default_detail
        self.errors = errors
        super().__init__(self.detail)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCode.UNAUTHENTICATED
    default_detail = "Unauthorized access"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = ErrorCode.FORBIDDEN
    default_detail = "Forbidden access"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.NOT_FOUND
    default_detail = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.CONFLICT
    default_detail = "Already exists"


class Invalid(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.INVALID
    default_detail = "Invalid request"


class Transient(AppError):
    """Store or network failure; safe for the client to retry."""


def _render(exc: AppError) -> JSONResponse:
    content: dict[str, Any] = {"detail": exc.detail, "code": exc.code.value}
    if exc.errors:
        content["errors"] = jsonable_encoder(exc.errors)
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Cookie"}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _render(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return _render(Invalid("Malformed request", errors=errors))


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Store operation failed",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return _render(Transient())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
