"""
Per-operation task services.

Each service wraps a single repository interaction plus the mapping from
ORM rows to response contracts. The SQLAlchemy session is handed in
through the constructor, so services can be built against any session
(the request-scoped Flask-SQLAlchemy one in the app, a plain one in
tests).
"""

from __future__ import annotations

import logging
import math

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .contracts import (
    CreateTaskRequest,
    GetTasksQuery,
    GetTasksResponse,
    PaginationMeta,
    RemoveTaskResponse,
    TaskResponse,
    UpdateTaskRequest,
)
from .errors import TaskNotFoundError
from .models import Task, TaskStatus, utcnow

logger = logging.getLogger(__name__)


class _TaskService:
    """Holds the session and the commit/rollback handling shared by all services."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _find(self, task_id: str) -> Task:
        task = self.session.get(Task, task_id)
        if not task:
            raise TaskNotFoundError(task_id)
        return task

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise


class CreateTaskService(_TaskService):
    """Insert a new task and return it."""

    def execute(self, request: CreateTaskRequest) -> TaskResponse:
        now = utcnow()
        task = Task(
            title=request.title,
            description=request.description,
            status=(request.status or TaskStatus.PENDING).value,
            priority=request.priority.value if request.priority else None,
            due_date=request.due_date,
            created_at=now,
            updated_at=now,
        )
        self.session.add(task)
        self._commit()

        logger.info("Created task %s", task.id)
        return TaskResponse.from_task(task)


class UpdateTaskService(_TaskService):
    """
    Replace the mutable fields of an existing task.

    ``title`` and ``status`` always come from the request; ``description``,
    ``priority`` and ``due_date`` are cleared when the request omits them.
    """

    def execute(self, task_id: str, request: UpdateTaskRequest) -> TaskResponse:
        task = self._find(task_id)

        task.title = request.title
        task.description = request.description
        task.status = request.status.value
        task.priority = request.priority.value if request.priority else None
        task.due_date = request.due_date
        task.updated_at = utcnow()
        self._commit()

        logger.info("Updated task %s", task_id)
        return TaskResponse.from_task(task)


class RemoveTaskService(_TaskService):
    """Hard-delete a task."""

    def execute(self, task_id: str) -> RemoveTaskResponse:
        task = self._find(task_id)
        self.session.delete(task)
        self._commit()

        logger.info("Deleted task %s", task_id)
        return RemoveTaskResponse(message="Task deleted successfully", id=task_id)


class GetTaskByIdService(_TaskService):
    def execute(self, task_id: str) -> TaskResponse:
        return TaskResponse.from_task(self._find(task_id))


class GetTasksService(_TaskService):
    """
    Return one page of tasks matching the optional filters.

    ``search`` is a case-insensitive substring match on the title or the
    description. Results are ordered newest first, ties broken by id.
    """

    def execute(self, query: GetTasksQuery) -> GetTasksResponse:
        stmt = select(Task)
        if query.status:
            stmt = stmt.where(Task.status == query.status.value)
        if query.priority:
            stmt = stmt.where(Task.priority == query.priority.value)
        if query.search:
            stmt = stmt.where(
                or_(
                    Task.title.icontains(query.search, autoescape=True),
                    Task.description.icontains(query.search, autoescape=True),
                )
            )

        total = self.session.scalar(
            select(func.count()).select_from(stmt.subquery())
        ) or 0
        tasks = self.session.scalars(
            stmt.order_by(Task.created_at.desc(), Task.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        ).all()

        logger.info(
            "Found %s tasks (page %s of %s matching)", len(tasks), query.page, total
        )
        return GetTasksResponse(
            data=[TaskResponse.from_task(task) for task in tasks],
            meta=PaginationMeta(
                page=query.page,
                limit=query.limit,
                total=total,
                totalPages=math.ceil(total / query.limit),
            ),
        )
