"""
HTML view routes for the frontend BFF service.

Implements the user-facing pages of the task manager. Each handler
builds a :class:`~frontend_app.store.TaskStore` for the current browser
session, runs one store action and renders the resulting state. The
module is organised into two sections:

1. **Helper functions** -- store construction, list-state persistence
   and form parsing that keep the route handlers concise.
2. **Task routes** -- list, view, create, edit, update and delete.

List and detail failures render an inline page-level error with a link
back to the list. Create, update and delete failures flash an error toast
and re-render the form with the submitted values.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from ..errors import ApiError, message_from_body
from ..models import (
    CreateTaskRequest,
    GetTasksQuery,
    Pagination,
    Task,
    TaskFilters,
    TaskPriority,
    TaskStatus,
    UpdateTaskRequest,
)
from ..store import (
    CREATE_TASK_ERROR,
    DELETE_TASK_ERROR,
    UPDATE_TASK_ERROR,
    TaskState,
    TaskStore,
)

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

TITLE_MAX_LENGTH = 255
MAX_PAGE_SIZE = 100
FILTER_FIELDS = ("status", "priority", "search")

EnumT = TypeVar("EnumT", bound=Enum)


# =====================================================================
# Helper Functions
# =====================================================================


def _enum_or_none(enum_cls: type[EnumT], value: str | None) -> EnumT | None:
    """Return the enum member named by *value*, or ``None`` for blank/unknown."""
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _session_scope() -> str:
    """Return the cancellation scope of this browser session, creating it once."""
    scope = session.get("store_scope")
    if not scope:
        scope = uuid.uuid4().hex
        session["store_scope"] = scope
    return scope


def _saved_filters() -> TaskFilters:
    saved = session.get("task_filters", {})
    return TaskFilters(
        status=_enum_or_none(TaskStatus, saved.get("status")),
        priority=_enum_or_none(TaskPriority, saved.get("priority")),
        search=saved.get("search") or None,
    )


def _task_store() -> TaskStore:
    """
    Build the store for this request from the session-persisted list state.

    The API client and the canceller are shared application-wide; the
    filters and pagination belong to the browser session.
    """
    state = TaskState(
        filters=_saved_filters(),
        pagination=Pagination(
            page=session.get("task_page", 1),
            limit=session.get("task_limit", 10),
        ),
    )
    return TaskStore(
        current_app.extensions["task_api_client"],
        current_app.extensions["task_canceller"],
        scope=_session_scope(),
        state=state,
    )


def _remember_list_state(state: TaskState) -> None:
    filters = state.filters
    session["task_filters"] = {
        "status": filters.status.value if filters.status else None,
        "priority": filters.priority.value if filters.priority else None,
        "search": filters.search,
    }
    session["task_page"] = state.pagination.page
    session["task_limit"] = state.pagination.limit


def _positive_int(name: str, upper: int | None = None) -> int | None:
    value = request.args.get(name, type=int)
    if value is None:
        return None
    value = max(1, value)
    return min(value, upper) if upper else value


def _apply_list_args(store: TaskStore) -> GetTasksQuery:
    """
    Fold filter and paging query-string arguments into *store*.

    Only filters present in the query string are changed; a changed
    filter sends the list back to page 1.
    """
    before = store.state.filters
    changes: dict[str, Any] = {}
    if "status" in request.args:
        changes["status"] = _enum_or_none(TaskStatus, request.args["status"])
    if "priority" in request.args:
        changes["priority"] = _enum_or_none(TaskPriority, request.args["priority"])
    if "search" in request.args:
        changes["search"] = request.args["search"].strip() or None
    if changes:
        store.set_filters(**changes)

    page = _positive_int("page")
    if store.state.filters != before:
        page = 1
    return GetTasksQuery(page=page, limit=_positive_int("limit", MAX_PAGE_SIZE))


def _toast_message(error: ApiError, default: str) -> str:
    """Prefer the API's own ``message``; otherwise use the operation default."""
    return message_from_body(error.response_body()) or default


@dataclass
class TaskForm:
    """Submitted (or pre-filled) values of the task form."""

    title: str = ""
    description: str = ""
    status: str = TaskStatus.PENDING.value
    priority: str = ""
    due_date: str = ""

    @classmethod
    def from_request(cls) -> TaskForm:
        return cls(
            title=request.form.get("title", "").strip(),
            description=request.form.get("description", "").strip(),
            status=request.form.get("status", ""),
            priority=request.form.get("priority", ""),
            due_date=request.form.get("due_date", "").strip(),
        )

    @classmethod
    def from_task(cls, task: Task) -> TaskForm:
        return cls(
            title=task.title,
            description=task.description or "",
            status=task.status.value,
            priority=task.priority.value if task.priority else "",
            due_date=task.due_date.strftime("%Y-%m-%dT%H:%M") if task.due_date else "",
        )

    def validate(self, *, status_required: bool) -> str | None:
        """Return the first validation message, or ``None`` when valid."""
        if not self.title:
            return "Title is required"
        if len(self.title) > TITLE_MAX_LENGTH:
            return "Title must be less than 255 characters"
        if status_required and not self.status:
            return "Status is required"
        if self.status and _enum_or_none(TaskStatus, self.status) is None:
            return "Invalid status"
        if self.priority and _enum_or_none(TaskPriority, self.priority) is None:
            return "Invalid priority"
        if self.due_date and self.due_date_iso() is None:
            return "Invalid date format"
        return None

    def due_date_iso(self) -> str | None:
        """Convert the ``datetime-local`` value to an ISO-8601 UTC string."""
        if not self.due_date:
            return None
        try:
            parsed = datetime.fromisoformat(self.due_date.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc).isoformat()
        except OverflowError:
            return None

    def to_create_request(self) -> CreateTaskRequest:
        return CreateTaskRequest(
            title=self.title,
            description=self.description or None,
            status=_enum_or_none(TaskStatus, self.status),
            priority=_enum_or_none(TaskPriority, self.priority),
            due_date=self.due_date_iso(),
        )

    def to_update_request(self) -> UpdateTaskRequest:
        return UpdateTaskRequest(
            title=self.title,
            status=TaskStatus(self.status),
            description=self.description or None,
            priority=_enum_or_none(TaskPriority, self.priority),
            due_date=self.due_date_iso(),
        )


def _render_form(form: TaskForm, *, task_id: str | None = None, status_code: int = 200):
    """Render the shared create/edit form."""
    if task_id is None:
        form_action = url_for("views.create_task")
        form_title = "Create New Task"
        cancel_url = url_for("views.index")
    else:
        form_action = url_for("views.update_task", task_id=task_id)
        form_title = "Edit Task"
        cancel_url = url_for("views.view_task", task_id=task_id)
    return (
        render_template(
            "task_form.html",
            form=form,
            statuses=TaskStatus,
            priorities=TaskPriority,
            form_action=form_action,
            form_title=form_title,
            cancel_url=cancel_url,
            edit_mode=task_id is not None,
        ),
        status_code,
    )


def _render_detail_error(error: str | None):
    return (
        render_template("task_detail.html", task=None, error=error, statuses=TaskStatus),
        404,
    )


# =====================================================================
# Task Routes
# =====================================================================


@views_bp.route("/health", methods=["GET"])
def health_check():
    """Liveness probe for the frontend process."""
    return {"status": "healthy", "service": "frontend"}, 200


@views_bp.route("/")
def index():
    """
    Render the task list page.

    Reads ``status``, ``priority``, ``search``, ``page`` and ``limit``
    from the query string, merges them with the filters remembered in
    the session and fetches the matching page of tasks.

    Returns:
        The rendered list page, or the same page with an inline error
        and status 502 when the task API call fails.
    """
    store = _task_store()
    query = _apply_list_args(store)
    store.fetch_tasks(query)
    state = store.state
    if not state.error:
        _remember_list_state(state)

    return (
        render_template(
            "index.html",
            tasks=state.tasks,
            pagination=state.pagination,
            filters=state.filters,
            filters_active=state.filters.is_active(),
            error=state.error,
            statuses=TaskStatus,
            priorities=TaskPriority,
        ),
        502 if state.error else 200,
    )


@views_bp.route("/tasks/new")
def new_task():
    """Render the empty task creation form."""
    return _render_form(TaskForm())


@views_bp.route("/tasks", methods=["POST"])
def create_task():
    """
    Handle task creation form submission.

    Returns:
        A redirect to the list on success, or the re-rendered form with
        an error toast (400 for invalid input, 502 for API failures).
    """
    form = TaskForm.from_request()
    message = form.validate(status_required=False)
    if message:
        flash(message, "error")
        return _render_form(form, status_code=400)

    store = _task_store()
    try:
        created = store.create_task(form.to_create_request())
    except ApiError as error:
        flash(_toast_message(error, CREATE_TASK_ERROR), "error")
        return _render_form(form, status_code=400 if error.status_code == 400 else 502)

    if created is not None:
        flash("Task created successfully", "success")
    return redirect(url_for("views.index"))


@views_bp.route("/tasks/<task_id>")
def view_task(task_id: str):
    """Render the task detail page, or an inline error when it cannot be loaded."""
    store = _task_store()
    store.fetch_task_by_id(task_id)
    state = store.state
    if state.error or state.selected_task is None:
        return _render_detail_error(state.error)
    return render_template(
        "task_detail.html", task=state.selected_task, error=None, statuses=TaskStatus
    )


@views_bp.route("/tasks/<task_id>/edit")
def edit_task(task_id: str):
    """Render the edit form pre-populated with the stored task."""
    store = _task_store()
    store.fetch_task_by_id(task_id)
    state = store.state
    if state.error or state.selected_task is None:
        return _render_detail_error(state.error)
    return _render_form(TaskForm.from_task(state.selected_task), task_id=task_id)


@views_bp.route("/tasks/<task_id>", methods=["POST"])
def update_task(task_id: str):
    """
    Handle the task edit form submission.

    ``status`` is required on update. On success the user is redirected
    to the detail page.
    """
    form = TaskForm.from_request()
    message = form.validate(status_required=True)
    if message:
        flash(message, "error")
        return _render_form(form, task_id=task_id, status_code=400)

    store = _task_store()
    try:
        updated = store.update_task(task_id, form.to_update_request())
    except ApiError as error:
        flash(_toast_message(error, UPDATE_TASK_ERROR), "error")
        status_code = error.status_code if error.status_code in (400, 404) else 502
        return _render_form(form, task_id=task_id, status_code=status_code)

    if updated is not None:
        flash("Task updated successfully", "success")
    return redirect(url_for("views.view_task", task_id=task_id))


@views_bp.route("/tasks/<task_id>/delete", methods=["POST"])
def delete_task(task_id: str):
    """Delete a task and return to the list with a toast."""
    store = _task_store()
    try:
        store.delete_task(task_id)
    except ApiError:
        flash(DELETE_TASK_ERROR, "error")
        return redirect(url_for("views.index"))

    flash("Task deleted successfully", "success")
    return redirect(url_for("views.index"))
