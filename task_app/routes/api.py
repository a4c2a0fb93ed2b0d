"""
REST API Endpoints for Task management.

Each handler parses its request contract, calls exactly one service and
serialises the service result. Errors (validation, not-found) are raised
as exceptions and rendered by the handlers in ``task_app.errors``.

Endpoints (mounted under ``/api/v1``):
    GET    /tasks          - List tasks (paginated, filterable)
    GET    /tasks/<id>     - Get a single task by ID
    POST   /tasks          - Create a new task
    PUT    /tasks/<id>     - Replace an existing task
    DELETE /tasks/<id>     - Delete a task
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from flask import Blueprint, Response, jsonify, request

from ..contracts import (
    CreateTaskRequest,
    GetTasksQuery,
    UpdateTaskRequest,
    validate_payload,
)
from ..errors import BadRequestError
from ..tasks_module import current_task_services

logger = logging.getLogger(__name__)

tasks_bp = Blueprint("tasks_v1", __name__)


# =====================================================================
# Helper Functions
# =====================================================================


def _json_body() -> dict[str, Any]:
    """
    Return the decoded JSON object sent with the request.

    Raises:
        BadRequestError: When the body is missing, malformed or not an object.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequestError("Request body must be JSON")
    return data


# =====================================================================
# API Endpoints
# =====================================================================


def get_tasks() -> tuple[Response, int]:
    """
    List tasks with optional filtering and pagination.

    Query Parameters:
        page: Page number (default 1)
        limit: Items per page, 1-100 (default 10)
        status: Filter by status
        priority: Filter by priority
        search: Substring searched in title and description

    Returns:
        ``{"data": [...], "meta": {page, limit, total, totalPages}}`` with 200.
    """
    query = validate_payload(GetTasksQuery, request.args.to_dict())
    result = current_task_services().get_tasks.execute(query)
    return jsonify(result.model_dump(mode="json")), 200


def get_task(task_id: str) -> tuple[Response, int]:
    """Get a single task by ID, or 404 when it does not exist."""
    result = current_task_services().get_task_by_id.execute(task_id)
    return jsonify(result.model_dump(mode="json")), 200


def create_task() -> tuple[Response, int]:
    """
    Create a new task.

    Request Body (JSON):
        title: Task title (required, 1-255 characters)
        description: Task description (optional)
        status: Task status (optional, default: PENDING)
        priority: Task priority (optional)
        due_date: Due date in ISO format (optional)

    Returns:
        The created task with 201, or a 400 validation error.
    """
    payload = validate_payload(CreateTaskRequest, _json_body())
    result = current_task_services().create_task.execute(payload)
    return jsonify(result.model_dump(mode="json")), 201


def update_task(task_id: str) -> tuple[Response, int]:
    """
    Replace an existing task.

    ``title`` and ``status`` are required. Optional fields left out of
    the body are cleared.

    Returns:
        The updated task with 200, 400 on validation failure or 404 when
        the task does not exist.
    """
    payload = validate_payload(UpdateTaskRequest, _json_body())
    result = current_task_services().update_task.execute(task_id, payload)
    return jsonify(result.model_dump(mode="json")), 200


def delete_task(task_id: str) -> tuple[Response, int]:
    """Delete a task; returns ``{"message", "id"}`` or 404."""
    result = current_task_services().remove_task.execute(task_id)
    return jsonify(result.model_dump(mode="json")), 200


# =====================================================================
# Route Table
# =====================================================================

TASK_ROUTES: list[tuple[str, list[str], Callable[..., tuple[Response, int]]]] = [
    ("/tasks", ["GET"], get_tasks),
    ("/tasks", ["POST"], create_task),
    ("/tasks/<task_id>", ["GET"], get_task),
    ("/tasks/<task_id>", ["PUT"], update_task),
    ("/tasks/<task_id>", ["DELETE"], delete_task),
]

for rule, methods, view in TASK_ROUTES:
    tasks_bp.add_url_rule(rule, view_func=view, methods=methods)
