"""
Wiring for the tasks feature.

Builds the bundle of per-operation services for the current request and
registers the tasks blueprint (whose route table lives in
``routes/api.py``) on the application.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, g
from sqlalchemy.orm import Session

from . import db
from .services import (
    CreateTaskService,
    GetTaskByIdService,
    GetTasksService,
    RemoveTaskService,
    UpdateTaskService,
)

API_VERSION_PREFIX = "/api/v1"


@dataclass(frozen=True)
class TaskServices:
    """One instance of every task service, all sharing a session."""

    create_task: CreateTaskService
    update_task: UpdateTaskService
    remove_task: RemoveTaskService
    get_task_by_id: GetTaskByIdService
    get_tasks: GetTasksService


def build_task_services(session: Session) -> TaskServices:
    """Construct the service bundle around *session*."""
    return TaskServices(
        create_task=CreateTaskService(session),
        update_task=UpdateTaskService(session),
        remove_task=RemoveTaskService(session),
        get_task_by_id=GetTaskByIdService(session),
        get_tasks=GetTasksService(session),
    )


def current_task_services() -> TaskServices:
    """Return the service bundle for the active request, building it on first use."""
    if "task_services" not in g:
        g.task_services = build_task_services(db.session)
    return g.task_services


def register_tasks_module(app: Flask) -> None:
    """Mount the versioned task endpoints under ``/api/v1``."""
    from .routes.api import tasks_bp

    app.register_blueprint(tasks_bp, url_prefix=API_VERSION_PREFIX)
