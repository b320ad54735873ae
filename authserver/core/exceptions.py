"""
Application error codes and the exception hierarchy raised by services.

Every failure carries an :class:`ErrorCode`, which fixes the HTTP status and
the message sent back to the client. The FastAPI handlers registered by
:func:`register_exception_handlers` translate them into responses.
"""
from enum import Enum
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    # 401
    UNAUTHORIZED = (status.HTTP_401_UNAUTHORIZED, "Authentication failed.")
    INVALID_TOKEN = (status.HTTP_401_UNAUTHORIZED, "JWT signature is invalid.")
    UNSUPPORTED_TOKEN = (status.HTTP_401_UNAUTHORIZED, "Unsupported JWT token.")
    EMPTY_TOKEN = (status.HTTP_401_UNAUTHORIZED, "JWT token is empty.")
    EXPIRED_REFRESH_TOKEN = (
        status.HTTP_401_UNAUTHORIZED,
        "Refresh token has expired. Please log in again.",
    )
    USER_NOT_FOUND = (status.HTTP_401_UNAUTHORIZED, "User does not exist.")
    MISSING_ACCESS_TOKEN = (
        status.HTTP_401_UNAUTHORIZED,
        "JWT token required for authentication is missing.",
    )
    UNKNOWN_TOKEN = (
        status.HTTP_401_UNAUTHORIZED,
        "Unexpected error while processing JWT.",
    )
    INVALID_TOKEN_SUBJECT = (status.HTTP_401_UNAUTHORIZED, "JWT subject is invalid.")

    # 403
    FORBIDDEN = (status.HTTP_403_FORBIDDEN, "Access denied.")
    FORBIDDEN_FILE_TYPE = (status.HTTP_403_FORBIDDEN, "File type is not allowed.")

    # 404
    NOT_FOUND_USER = (status.HTTP_404_NOT_FOUND, "User does not exist.")

    # 409
    CONFLICT_USER = (
        status.HTTP_409_CONFLICT,
        "An account with this username already exists. Please log in.",
    )

    # 500
    INTERNAL_SERVER = (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Unexpected server error.",
    )

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message


class AppException(Exception):
    """Base class for failures that map onto an :class:`ErrorCode`."""

    default_code = ErrorCode.INTERNAL_SERVER

    def __init__(
        self,
        error_code: Optional[ErrorCode] = None,
        message: Optional[str] = None,
    ) -> None:
        self.error_code = error_code or self.default_code
        self.message = message or self.error_code.message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.error_code.status_code


class UnauthorizedError(AppException):
    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(AppException):
    default_code = ErrorCode.FORBIDDEN


class NotFoundError(AppException):
    default_code = ErrorCode.NOT_FOUND_USER


class ConflictError(AppException):
    default_code = ErrorCode.CONFLICT_USER


class InternalServerError(AppException):
    default_code = ErrorCode.INTERNAL_SERVER


def error_response(exc: AppException) -> JSONResponse:
    """Render an application failure as the JSON error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.error_code.name, "detail": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate :class:`AppException` raised by routes into error responses."""

    @app.exception_handler(AppException)
    async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "%s %s failed code=%s status=%s",
            request.method,
            request.url.path,
            exc.error_code.name,
            exc.status_code,
        )
        return error_response(exc)
