"""
Error types and JSON error handlers for the Task API.

Every failure leaves the service as a JSON body of the same shape::

    {"statusCode": 404, "error": "Not Found",
     "message": "Task with ID abc not found",
     "timestamp": "2025-01-01T00:00:00+00:00", "path": "/api/v1/tasks/abc"}

Validation failures add an ``errors`` list with one ``{field, message}``
entry per rejected field.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from flask import Flask, Response, current_app, jsonify, request
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException
from werkzeug.http import HTTP_STATUS_CODES

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(ApiError):
    """The request could not be understood (e.g. the body is not JSON)."""

    status_code = 400


class RequestValidationError(BadRequestError):
    """
    One or more request fields failed validation.

    Attributes:
        errors: ``{"field": ..., "message": ...}`` dictionaries, one per
            rejected field.
    """

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        summary = "; ".join(f"{item['field']}: {item['message']}" for item in errors)
        super().__init__(summary or "Validation failed")

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> RequestValidationError:
        """Flatten a pydantic ``ValidationError`` into field-level messages."""
        errors = []
        for detail in exc.errors():
            field = ".".join(str(part) for part in detail["loc"]) or "body"
            message = detail["msg"]
            # pydantic prefixes messages raised from validators with "Value error, ".
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.append({"field": field, "message": message})
        return cls(errors)


class TaskNotFoundError(ApiError):
    """The requested task id has no corresponding row."""

    status_code = 404

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


def error_body(status_code: int, message: str, **extra: Any) -> dict[str, Any]:
    """Build the JSON error payload shared by every error handler."""
    body: dict[str, Any] = {
        "statusCode": status_code,
        "error": HTTP_STATUS_CODES.get(status_code, "Unknown Error"),
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.path,
    }
    body.update(extra)
    return body


def _handle_api_error(error: ApiError) -> tuple[Response, int]:
    extra: dict[str, Any] = {}
    if isinstance(error, RequestValidationError):
        extra["errors"] = error.errors
    logger.warning("%s %s -> %s: %s", request.method, request.path, error.status_code, error.message)
    return jsonify(error_body(error.status_code, error.message, **extra)), error.status_code


def _handle_http_exception(error: HTTPException) -> tuple[Response, int]:
    status_code = error.code or 500
    return jsonify(error_body(status_code, error.description or error.name)), status_code


def _handle_unexpected_error(error: Exception) -> tuple[Response, int]:
    logger.exception("%s %s failed: %s", request.method, request.path, error)
    message = str(error) or INTERNAL_ERROR_MESSAGE
    # Internal details never leave the process in production.
    if current_app.config.get("ENVIRONMENT") == "production":
        message = INTERNAL_ERROR_MESSAGE
    return jsonify(error_body(500, message)), 500


def register_error_handlers(app: Flask) -> None:
    """Attach the JSON error handlers to *app*."""
    app.register_error_handler(ApiError, _handle_api_error)
    app.register_error_handler(HTTPException, _handle_http_exception)
    app.register_error_handler(Exception, _handle_unexpected_error)
