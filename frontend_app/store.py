"""
Client-side task store.

``TaskStore`` caches the current page of tasks, the selected task, the
pagination block and the active filters, and orchestrates the API calls
that refresh them. All state changes go through :meth:`TaskStore._set`,
which applies one atomic transition under a lock.

Fetch actions never raise: a failure becomes the ``error`` message shown
on the page. Create, update and delete store the message and re-raise so
the caller can keep its form open. A cancelled request clears ``loading``,
leaves ``error`` untouched and returns early.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from .api_client import CancellationToken, RequestCanceller, TaskApiClient
from .errors import classify_error, is_cancel
from .models import (
    CreateTaskRequest,
    GetTasksQuery,
    Pagination,
    Task,
    TaskFilters,
    UpdateTaskRequest,
)

logger = logging.getLogger(__name__)

LIST_KEY = "tasks:list"
DETAIL_KEY = "tasks:detail"

FETCH_TASKS_ERROR = "Failed to fetch tasks"
FETCH_TASK_ERROR = "Failed to fetch task"
CREATE_TASK_ERROR = "Failed to create task"
UPDATE_TASK_ERROR = "Failed to update task"
DELETE_TASK_ERROR = "Failed to delete task"


@dataclass
class TaskState:
    tasks: list[Task] = field(default_factory=list)
    selected_task: Task | None = None
    loading: bool = False
    error: str | None = None
    pagination: Pagination = field(default_factory=Pagination)
    filters: TaskFilters = field(default_factory=TaskFilters)


class TaskStore:
    """
    State container for the task views.

    Args:
        api: Client used for every remote call.
        canceller: Shared token registry. Requests issued under the same
            key cancel each other.
        scope: Prefix for cancellation keys, so separate browser sessions
            never cancel one another.
        state: Initial state (defaults to an empty store).
    """

    def __init__(
        self,
        api: TaskApiClient,
        canceller: RequestCanceller | None = None,
        *,
        scope: str = "",
        state: TaskState | None = None,
    ) -> None:
        self.api = api
        self.canceller = canceller or RequestCanceller()
        self.scope = scope
        self._state = state or TaskState()
        self._lock = threading.RLock()

    # -----------------------------------------------------------------
    # State access
    # -----------------------------------------------------------------

    @property
    def state(self) -> TaskState:
        """A copy of the current state."""
        with self._lock:
            return copy.deepcopy(self._state)

    def _set(self, **changes: Any) -> None:
        with self._lock:
            for name, value in changes.items():
                setattr(self._state, name, value)

    def set_loading(self, loading: bool) -> None:
        self._set(loading=loading)

    def set_error(self, error: str | None) -> None:
        self._set(error=error)

    def set_tasks(self, tasks: list[Task]) -> None:
        self._set(tasks=list(tasks))

    def set_selected_task(self, task: Task | None) -> None:
        self._set(selected_task=task)

    def set_pagination(self, pagination: Pagination) -> None:
        self._set(pagination=pagination)

    def set_filters(self, **filters: Any) -> None:
        """Merge *filters* into the stored filters; unspecified ones are kept."""
        with self._lock:
            current = self._state.filters
            self._state.filters = TaskFilters(
                status=filters.get("status", current.status),
                priority=filters.get("priority", current.priority),
                search=filters.get("search", current.search),
            )

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _key(self, name: str) -> str:
        return f"{self.scope}:{name}" if self.scope else name

    def _issue(self, name: str) -> CancellationToken:
        return self.canceller.issue(self._key(name))

    def _settle_cancelled(self, token: CancellationToken) -> None:
        self._set(loading=False)
        logger.debug("Request %s cancelled", token.key)

    def _fail(self, error: Exception, default: str) -> None:
        message = classify_error(error, default)
        logger.warning("%s: %s", default, message)
        self._set(error=message, loading=False)

    def _merged_query(self, query: GetTasksQuery | None) -> GetTasksQuery:
        query = query or GetTasksQuery()
        with self._lock:
            filters = self._state.filters
            pagination = self._state.pagination
            return GetTasksQuery(
                page=query.page or pagination.page,
                limit=query.limit or pagination.limit,
                status=query.status or filters.status,
                priority=query.priority or filters.priority,
                search=query.search or filters.search,
            )

    # -----------------------------------------------------------------
    # API actions
    # -----------------------------------------------------------------

    def fetch_tasks(self, query: GetTasksQuery | None = None) -> None:
        """
        Load one page of tasks.

        Explicit *query* values win over the stored filters, which win
        over the stored pagination. Never raises.
        """
        self._set(loading=True, error=None)
        merged = self._merged_query(query)
        token = self._issue(LIST_KEY)
        try:
            response = self.api.get_tasks(merged, token)
        except Exception as error:
            if is_cancel(error):
                self._settle_cancelled(token)
                return
            self._fail(error, FETCH_TASKS_ERROR)
            return
        finally:
            self.canceller.release(token)
        self._set(tasks=response.data, pagination=response.meta, loading=False)

    def fetch_task_by_id(self, task_id: str) -> None:
        """Load a single task into ``selected_task``. Never raises."""
        self._set(loading=True, error=None)
        token = self._issue(DETAIL_KEY)
        try:
            task = self.api.get_task_by_id(task_id, token)
        except Exception as error:
            if is_cancel(error):
                self._settle_cancelled(token)
                return
            self._fail(error, FETCH_TASK_ERROR)
            return
        finally:
            self.canceller.release(token)
        self._set(selected_task=task, loading=False)

    def create_task(self, data: CreateTaskRequest) -> Task | None:
        """
        Create a task and return it.

        Returns ``None`` when the request was cancelled.

        Raises:
            ApiError: After storing the classified message in ``error``.
        """
        self._set(loading=True, error=None)
        token = self._issue("tasks:create")
        try:
            task = self.api.create_task(data, token)
        except Exception as error:
            if is_cancel(error):
                self._settle_cancelled(token)
                return None
            self._fail(error, CREATE_TASK_ERROR)
            raise
        finally:
            self.canceller.release(token)
        self._set(loading=False)
        return task

    def update_task(self, task_id: str, data: UpdateTaskRequest) -> Task | None:
        """
        Update a task, select it and refresh the list.

        Returns ``None`` when the request was cancelled.

        Raises:
            ApiError: After storing the classified message in ``error``.
        """
        self._set(loading=True, error=None)
        token = self._issue(f"tasks:update:{task_id}")
        try:
            task = self.api.update_task(task_id, data, token)
        except Exception as error:
            if is_cancel(error):
                self._settle_cancelled(token)
                return None
            self._fail(error, UPDATE_TASK_ERROR)
            raise
        finally:
            self.canceller.release(token)
        self._set(loading=False, selected_task=task)
        self.fetch_tasks()
        return task

    def delete_task(self, task_id: str) -> None:
        """
        Delete a task and refresh the list.

        Raises:
            ApiError: After storing the classified message in ``error``.
        """
        self._set(loading=True, error=None)
        token = self._issue(f"tasks:delete:{task_id}")
        try:
            self.api.delete_task(task_id, token)
        except Exception as error:
            if is_cancel(error):
                self._settle_cancelled(token)
                return
            self._fail(error, DELETE_TASK_ERROR)
            raise
        finally:
            self.canceller.release(token)
        self._set(loading=False)
        self.fetch_tasks()
