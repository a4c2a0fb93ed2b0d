"""
Request and response contracts for the task endpoints.

Each operation has its own pydantic model. Request models forbid
undeclared fields, coerce query-string values to their declared types
and run the free-text sanitiser before the length checks. The same
models drive the generated OpenAPI document served at ``/api/docs``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import RequestValidationError
from .models import TITLE_MAX_LENGTH, Task, TaskPriority, TaskStatus, ensure_utc
from .sanitize import sanitize_string

ModelT = TypeVar("ModelT", bound=BaseModel)

TASK_ID_EXAMPLE = "123e4567-e89b-12d3-a456-426614174000"
MAX_PAGE = 2**31 - 1


def parse_due_date(value: Any) -> datetime | None:
    """
    Parse an optional ISO-8601 date-time string into a UTC datetime.

    Empty values map to ``None``. Anything that is not a string, a
    string that is not ISO-8601, or an instant that cannot be expressed
    in UTC is rejected.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _to_utc(value)
    if not isinstance(value, str):
        raise ValueError("due_date must be an ISO-8601 date-time string")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(
            "Invalid date format. Must be a valid ISO date string"
        ) from None
    return _to_utc(parsed)


def _to_utc(value: datetime) -> datetime:
    try:
        return ensure_utc(value)
    except OverflowError:
        # An offset near year 1 or 9999 pushes the UTC instant out of range.
        raise ValueError("due_date is out of the supported date range") from None


class _TaskWriteRequest(BaseModel):
    """Fields and validators shared by the create and update bodies."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Task title",
        examples=["Complete project documentation"],
    )
    description: str | None = Field(
        None,
        description="Task description",
        examples=["Write comprehensive documentation"],
    )
    priority: TaskPriority | None = Field(None, description="Task priority")
    due_date: datetime | None = Field(
        None,
        description="Task due date (ISO-8601)",
        examples=["2024-12-31T23:59:59Z"],
    )

    @field_validator("title", mode="before")
    @classmethod
    def _clean_title(cls, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_string(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _clean_description(cls, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_string(value) or None
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> datetime | None:
        return parse_due_date(value)


class CreateTaskRequest(_TaskWriteRequest):
    """Body of ``POST /tasks``. Only ``title`` is required."""

    status: TaskStatus | None = Field(
        TaskStatus.PENDING,
        description="Task status (defaults to PENDING)",
    )


class UpdateTaskRequest(_TaskWriteRequest):
    """
    Body of ``PUT /tasks/{id}``.

    ``status`` is required here although it is optional on create. The
    update replaces the whole record, so omitted optional fields are
    cleared.
    """

    status: TaskStatus = Field(..., description="Task status")


class GetTasksQuery(BaseModel):
    """Query string of ``GET /tasks``."""

    model_config = ConfigDict(extra="forbid")

    page: int = Field(
        1, ge=1, le=MAX_PAGE, description="Page number", examples=[1]
    )
    limit: int = Field(
        10, ge=1, le=100, description="Number of items per page", examples=[10]
    )
    status: TaskStatus | None = Field(None, description="Filter by status")
    priority: TaskPriority | None = Field(None, description="Filter by priority")
    search: str | None = Field(
        None,
        description="Case-insensitive search term for title or description",
        examples=["project"],
    )

    @field_validator("status", "priority", mode="before")
    @classmethod
    def _blank_filter_is_unset(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("search", mode="before")
    @classmethod
    def _clean_search(cls, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_string(value) or None
        return value


class TaskResponse(BaseModel):
    """A task as returned by every endpoint that yields one."""

    id: str = Field(..., description="Task ID", examples=[TASK_ID_EXAMPLE])
    title: str = Field(..., description="Task title")
    description: str | None = Field(..., description="Task description")
    status: TaskStatus = Field(..., description="Task status")
    priority: TaskPriority | None = Field(..., description="Task priority")
    due_date: datetime | None = Field(..., description="Task due date")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @classmethod
    def from_task(cls, task: Task) -> TaskResponse:
        """Map an ORM row onto the response shape, keeping nulls as nulls."""
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=TaskStatus(task.status),
            priority=TaskPriority(task.priority) if task.priority else None,
            due_date=ensure_utc(task.due_date),
            created_at=ensure_utc(task.created_at),
            updated_at=ensure_utc(task.updated_at),
        )


class PaginationMeta(BaseModel):
    """Pagination block of the list response."""

    page: int
    limit: int
    total: int
    totalPages: int


class GetTasksResponse(BaseModel):
    """Body of ``GET /tasks``."""

    data: list[TaskResponse]
    meta: PaginationMeta


class RemoveTaskResponse(BaseModel):
    """Body of ``DELETE /tasks/{id}``."""

    message: str = Field(..., examples=["Task deleted successfully"])
    id: str = Field(..., examples=[TASK_ID_EXAMPLE])


class FieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Shape of every error body (``errors`` only on validation failures)."""

    statusCode: int
    error: str
    message: str
    timestamp: datetime
    path: str
    errors: list[FieldError] | None = None


def validate_payload(model: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate *data* against *model*.

    Raises:
        RequestValidationError: With one entry per rejected field.
    """
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        raise RequestValidationError.from_pydantic(exc) from None
