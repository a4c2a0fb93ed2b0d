"""
Generated API documentation.

Builds an OpenAPI 3.1 document from the pydantic contracts in
``task_app.contracts`` and serves it in three forms:

    GET /api/docs        - Swagger UI page
    GET /api/docs-json   - The document as JSON
    GET /api/docs-yaml   - The document as YAML
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import yaml
from flask import Blueprint, Response, jsonify, render_template_string
from pydantic.json_schema import models_json_schema

from ..contracts import (
    CreateTaskRequest,
    ErrorResponse,
    GetTasksQuery,
    GetTasksResponse,
    RemoveTaskResponse,
    TaskResponse,
    UpdateTaskRequest,
)
from ..tasks_module import API_VERSION_PREFIX

docs_bp = Blueprint("docs", __name__)

SCHEMA_REF = "#/components/schemas/{model}"

SWAGGER_UI_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Task Management API</title>
  <link rel="stylesheet" href="https://unpkg.com/swagger-ui-dist@5/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="https://unpkg.com/swagger-ui-dist@5/swagger-ui-bundle.js"></script>
  <script>
    window.onload = () => {
      window.ui = SwaggerUIBundle({url: "{{ spec_url }}", dom_id: "#swagger-ui"});
    };
  </script>
</body>
</html>
"""


def _ref(model: type) -> dict[str, str]:
    return {"$ref": SCHEMA_REF.format(model=model.__name__)}


def _json_content(model: type) -> dict[str, Any]:
    return {"application/json": {"schema": _ref(model)}}


def _error(description: str) -> dict[str, Any]:
    return {"description": description, "content": _json_content(ErrorResponse)}


def _task_id_parameter() -> dict[str, Any]:
    return {
        "name": "task_id",
        "in": "path",
        "required": True,
        "description": "Task ID",
        "schema": {"type": "string", "format": "uuid"},
    }


@lru_cache(maxsize=1)
def build_openapi_document() -> dict[str, Any]:
    """
    Assemble the OpenAPI document for the task endpoints.

    Request models are rendered in validation mode and response models in
    serialisation mode, so each component schema describes what the
    endpoint actually accepts or returns.
    """
    _, definitions = models_json_schema(
        [
            (CreateTaskRequest, "validation"),
            (UpdateTaskRequest, "validation"),
            (GetTasksQuery, "validation"),
            (TaskResponse, "serialization"),
            (GetTasksResponse, "serialization"),
            (RemoveTaskResponse, "serialization"),
            (ErrorResponse, "serialization"),
        ],
        ref_template=SCHEMA_REF,
    )
    schemas = definitions.get("$defs", {})

    list_parameters = [
        {"name": name, "in": "query", "required": False, "schema": schema}
        for name, schema in schemas["GetTasksQuery"]["properties"].items()
    ]

    collection = f"{API_VERSION_PREFIX}/tasks"
    item = f"{API_VERSION_PREFIX}/tasks/{{task_id}}"

    return {
        "openapi": "3.1.0",
        "info": {
            "title": "Task Management API",
            "description": "API documentation for Task Management Application",
            "version": "1.0",
        },
        "tags": [{"name": "tasks"}],
        "paths": {
            collection: {
                "get": {
                    "tags": ["tasks"],
                    "summary": "List tasks",
                    "operationId": "getTasks",
                    "parameters": list_parameters,
                    "responses": {
                        "200": {
                            "description": "Page of tasks",
                            "content": _json_content(GetTasksResponse),
                        },
                        "400": _error("Invalid query parameters"),
                    },
                },
                "post": {
                    "tags": ["tasks"],
                    "summary": "Create a task",
                    "operationId": "createTask",
                    "requestBody": {
                        "required": True,
                        "content": _json_content(CreateTaskRequest),
                    },
                    "responses": {
                        "201": {
                            "description": "Task created successfully",
                            "content": _json_content(TaskResponse),
                        },
                        "400": _error("Bad request - validation failed"),
                    },
                },
            },
            item: {
                "parameters": [_task_id_parameter()],
                "get": {
                    "tags": ["tasks"],
                    "summary": "Get a task by ID",
                    "operationId": "getTaskById",
                    "responses": {
                        "200": {
                            "description": "The task",
                            "content": _json_content(TaskResponse),
                        },
                        "404": _error("Task not found"),
                    },
                },
                "put": {
                    "tags": ["tasks"],
                    "summary": "Update a task",
                    "operationId": "updateTask",
                    "requestBody": {
                        "required": True,
                        "content": _json_content(UpdateTaskRequest),
                    },
                    "responses": {
                        "200": {
                            "description": "Task updated successfully",
                            "content": _json_content(TaskResponse),
                        },
                        "400": _error("Bad request - validation failed"),
                        "404": _error("Task not found"),
                    },
                },
                "delete": {
                    "tags": ["tasks"],
                    "summary": "Delete a task",
                    "operationId": "removeTask",
                    "responses": {
                        "200": {
                            "description": "Task deleted successfully",
                            "content": _json_content(RemoveTaskResponse),
                        },
                        "404": _error("Task not found"),
                    },
                },
            },
        },
        "components": {"schemas": schemas},
    }


@docs_bp.route("/docs", methods=["GET"])
def swagger_ui() -> str:
    return render_template_string(SWAGGER_UI_PAGE, spec_url="/api/docs-json")


@docs_bp.route("/docs-json", methods=["GET"])
def openapi_json() -> tuple[Response, int]:
    return jsonify(build_openapi_document()), 200


@docs_bp.route("/docs-yaml", methods=["GET"])
def openapi_yaml() -> Response:
    body = yaml.safe_dump(build_openapi_document(), sort_keys=False, allow_unicode=True)
    return Response(body, mimetype="application/yaml")
