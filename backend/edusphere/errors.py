"""
Structured application errors.

Every failure a handler can report is an AppError carrying an ErrorKind.
The kind alone decides the HTTP status, in ERROR_STATUS below, and the
exception handlers registered here are the only place that turns errors
into JSON responses.
"""

import enum
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError

from edusphere.config import settings

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    INTERNAL = "INTERNAL"


# CONFLICT stays 400: clients already treat "session is full" as a bad request.
ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UPSTREAM_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_REPORTED_KINDS = {ErrorKind.UPSTREAM_FAILURE, ErrorKind.INTERNAL}


class AppError(Exception):
    """An error with a kind, a short label and a human-readable message."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        error: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.error = error or message
        self.extra = extra or {}

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]

    @classmethod
    def invalid(cls, message: str, error: str = "Invalid request") -> "AppError":
        return cls(ErrorKind.INVALID_REQUEST, message, error)

    @classmethod
    def unauthorized(cls, error: str, message: str) -> "AppError":
        return cls(ErrorKind.UNAUTHORIZED, message, error)

    @classmethod
    def forbidden(cls, error: str, message: str) -> "AppError":
        return cls(ErrorKind.FORBIDDEN, message, error)

    @classmethod
    def not_found(cls, error: str, message: str) -> "AppError":
        return cls(ErrorKind.NOT_FOUND, message, error)

    @classmethod
    def conflict(cls, error: str, message: str) -> "AppError":
        return cls(ErrorKind.CONFLICT, message, error)

    @classmethod
    def upstream(cls, message: str, extra: Optional[Dict[str, Any]] = None) -> "AppError":
        return cls(ErrorKind.UPSTREAM_FAILURE, message, "Upstream service failed", extra)


_UNKNOWN_TAG_ERRORS = {"union_tag_invalid", "union_tag_not_found"}


def parse_action(adapter: TypeAdapter, payload: Any) -> Any:
    """
    Validate an action-tagged request body against a discriminated union.
    Unknown or missing actions and bad fields both become INVALID_REQUEST.
    """
    try:
        return adapter.validate_python(payload)
    except ValidationError as e:
        first = e.errors()[0]
        if first["type"] in _UNKNOWN_TAG_ERRORS:
            action = payload.get("action") if isinstance(payload, dict) else None
            if action is None:
                raise AppError.invalid("Action parameter is required", "Invalid action") from e
            raise AppError.invalid(f"Action '{action}' is not supported", "Invalid action") from e
        location = ".".join(str(part) for part in first["loc"][1:]) or "body"
        raise AppError.invalid(f"{location}: {first['msg']}", "Validation failed") from e


def error_body(exc: AppError) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "error": exc.error,
        "message": exc.message,
        "kind": exc.kind.value,
    }
    if exc.extra:
        body["details"] = exc.extra
    if exc.kind in _REPORTED_KINDS:
        body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.kind in _REPORTED_KINDS:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind.value}: {exc.message}")
        sentry_sdk.capture_exception(exc)
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind.value}: {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "Invalid request")
    return await app_error_handler(request, AppError.invalid(message, "Validation failed"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    sentry_sdk.capture_exception(exc)
    message = str(exc) if settings.DEBUG else "An unexpected error occurred"
    wrapped = AppError(ErrorKind.INTERNAL, message, "Internal server error")
    return JSONResponse(status_code=wrapped.status_code, content=error_body(wrapped))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
