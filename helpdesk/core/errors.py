import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from psycopg import OperationalError

from helpdesk.core.config import get_settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """An expected failure, rendered as ``{"error": {code, message, details}}``."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @classmethod
    def bad_request(cls, code: str, message: str, **details: Any) -> "AppError":
        return cls(status.HTTP_400_BAD_REQUEST, code, message, details)

    @classmethod
    def unauthorized(cls, code: str, message: str) -> "AppError":
        return cls(status.HTTP_401_UNAUTHORIZED, code, message)

    @classmethod
    def not_found(cls, entity: str, **details: Any) -> "AppError":
        return cls(
            status.HTTP_404_NOT_FOUND,
            f"{entity.upper()}_NOT_FOUND",
            f"{entity.replace('_', ' ').capitalize()} not found.",
            details,
        )

    @classmethod
    def conflict(cls, code: str, message: str, **details: Any) -> "AppError":
        return cls(status.HTTP_409_CONFLICT, code, message, details)

    @classmethod
    def invalid_reference(cls, message: str, **details: Any) -> "AppError":
        return cls.bad_request("INVALID_REFERENCE", message, **details)


def error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            }
        },
        headers=headers,
    )


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        headers=headers,
    )


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        code="VALIDATION_ERROR",
        message="Request validation failed.",
        details={"issues": exc.errors()},
    )


async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
    return error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        code="DATABASE_UNAVAILABLE",
        message="The ticket database is unavailable. Try again shortly.",
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # Internal details only leak in debug builds.
    details = {"reason": str(exc)} if get_settings().app_debug else None
    return error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="INTERNAL_SERVER_ERROR",
        message="Unexpected server error.",
        details=details,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
