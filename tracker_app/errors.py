"""
Typed errors and the single HTTP error boundary.

Services raise the exceptions defined here; nothing below the routes
builds a response. :func:`register_error_handlers` installs the only
translator from exception to JSON, always producing the same envelope::

    {
        "timestamp": "2026-01-15T08:30:00.123456+00:00",
        "status": 404,
        "error": "TASK_NOT_FOUND",
        "message": "Task not found with ID: 7",
        "path": "/api/tasks/7",
        "fieldErrors": null
    }

Stack traces never reach the client; unexpected errors are logged with
their traceback and reported as a generic 500.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """Base class for errors that map to a fixed HTTP status and code."""

    status_code: int = 400
    error_code: str = "BUSINESS_RULE_VIOLATION"

    def __init__(self, message: str, field_errors: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors


class DuplicateUsername(TrackerError):
    status_code = 409
    error_code = "DUPLICATE_ENTRY"


class InvalidInput(TrackerError):
    status_code = 400
    error_code = "INVALID"


class PersonNotFound(TrackerError):
    status_code = 404
    error_code = "USER_NOT_FOUND"


class TaskNotFound(TrackerError):
    status_code = 404
    error_code = "TASK_NOT_FOUND"


class BadCredentials(TrackerError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class Unauthenticated(TrackerError):
    """An anonymous request reached an endpoint that needs a principal."""

    status_code = 401
    error_code = "UNAUTHORIZED"


class Forbidden(TrackerError):
    status_code = 403
    error_code = "FORBIDDEN"


class ValidationError(TrackerError):
    """Structural or field-level constraint violation of a request body."""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, field_errors: dict[str, str], message: str = "Validation failed."):
        super().__init__(message, field_errors=field_errors)


class MismatchError(TrackerError):
    """A path or query parameter could not be coerced to its expected type."""

    status_code = 400

    def __init__(self, message: str, error_code: str, status_code: int):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code

    @classmethod
    def for_enum(cls, value: Any, enum_cls: type[Enum]) -> "MismatchError":
        options = ", ".join(member.name for member in enum_cls)
        if value is None:
            message = "Null values not allowed"
        else:
            message = f"'{value}' not part of available options: [{options}]"
        return cls(message, error_code="ENUM_ARG_MISMATCH", status_code=404)

    @classmethod
    def for_type(cls, name: str, value: Any, required: str) -> "MismatchError":
        given = type(value).__name__ if value is not None else "?"
        given = "String" if given == "str" else given
        message = (
            f"Parameter '{name}' should be of type {required}, "
            f"but value '{value}' is of type {given}"
        )
        return cls(
            message,
            error_code=f"MISMATCH: {required.upper()} IS NOT {given.upper()}",
            status_code=400,
        )


def error_response(
    status: int,
    error: str,
    message: str,
    field_errors: dict[str, str] | None = None,
) -> tuple[Response, int]:
    """
    Build the standard JSON error envelope for the current request.

    Args:
        status: HTTP status code.
        error: Short machine-readable code.
        message: Human-readable description.
        field_errors: Optional per-field messages (validation errors only).

    Returns:
        A ``(Response, int)`` tuple suitable for returning from a view or hook.
    """
    body = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status,
        "error": error,
        "message": message,
        "path": request.path,
        "fieldErrors": field_errors,
    }
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    """Install the error boundary on *app*."""

    @app.errorhandler(TrackerError)
    def handle_tracker_error(error: TrackerError) -> tuple[Response, int]:
        logger.warning(
            "%s %s -> %s %s: %s",
            request.method,
            request.path,
            error.status_code,
            error.error_code,
            error.message,
        )
        return error_response(
            error.status_code, error.error_code, error.message, error.field_errors
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> tuple[Response, int]:
        status = error.code or 500
        code = (error.name or "Error").upper().replace(" ", "_")
        logger.warning("%s %s -> %s %s", request.method, request.path, status, code)
        return error_response(status, code, error.description or error.name)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> tuple[Response, int]:
        logger.exception("Unhandled exception on %s %s", request.method, request.path)
        return error_response(500, "INTERNAL_SERVER_ERROR", "Unexpected server error.")
