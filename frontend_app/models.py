"""
Frontend data models.

Mirrors the task API contract as plain dataclasses. The enums are
duplicated rather than imported from ``task_app`` so the frontend can be
deployed and tested without the API package.

Both enums inherit from ``str`` as well as ``Enum`` so that their values
serialise naturally to JSON strings and compare directly against the
plain strings returned by the task API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Task lifecycle statuses (mirrors the task API contract)."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(str, Enum):
    """Task priority levels (mirrors the task API contract)."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def parse_iso_datetime(iso_string: str | None) -> datetime | None:
    """
    Parse an ISO-8601 datetime string returned by the task API.

    Handles the ``Z`` suffix by replacing it with the equivalent
    ``+00:00`` offset that :meth:`datetime.fromisoformat` understands.

    Returns:
        A :class:`datetime`, or ``None`` when the input is empty or
        cannot be parsed.
    """
    if not iso_string:
        return None
    try:
        return datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    except ValueError:
        return None


def _drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


@dataclass
class Task:
    """A task as returned by the API, with timestamps parsed."""

    id: str
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority | None
    due_date: datetime | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        priority = data.get("priority")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description"),
            status=TaskStatus(data["status"]),
            priority=TaskPriority(priority) if priority else None,
            due_date=parse_iso_datetime(data.get("due_date")),
            created_at=parse_iso_datetime(data.get("created_at")),
            updated_at=parse_iso_datetime(data.get("updated_at")),
        )


@dataclass
class Pagination:
    page: int = 1
    limit: int = 10
    total: int = 0
    totalPages: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pagination:
        return cls(
            page=int(data.get("page", 1)),
            limit=int(data.get("limit", 10)),
            total=int(data.get("total", 0)),
            totalPages=int(data.get("totalPages", 0)),
        )


@dataclass
class TaskFilters:
    """Active list filters. ``None`` means the filter is not applied."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None

    def is_active(self) -> bool:
        return bool(self.status or self.priority or self.search)


@dataclass
class GetTasksQuery:
    page: int | None = None
    limit: int | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str | None = None

    def to_params(self) -> dict[str, Any]:
        """Render as query-string parameters, leaving out unset values."""
        return _drop_none(
            {
                "page": self.page,
                "limit": self.limit,
                "status": self.status.value if self.status else None,
                "priority": self.priority.value if self.priority else None,
                "search": self.search or None,
            }
        )


@dataclass
class GetTasksResponse:
    data: list[Task] = field(default_factory=list)
    meta: Pagination = field(default_factory=Pagination)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> GetTasksResponse:
        return cls(
            data=[Task.from_dict(item) for item in payload.get("data", [])],
            meta=Pagination.from_dict(payload.get("meta", {})),
        )


@dataclass
class CreateTaskRequest:
    """Body of a create call. Only ``title`` is required."""

    title: str
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_none(
            {
                "title": self.title,
                "description": self.description,
                "status": self.status.value if self.status else None,
                "priority": self.priority.value if self.priority else None,
                "due_date": self.due_date,
            }
        )


@dataclass
class UpdateTaskRequest:
    """Body of an update call. ``title`` and ``status`` are required."""

    title: str
    status: TaskStatus
    description: str | None = None
    priority: TaskPriority | None = None
    due_date: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return _drop_none(
            {
                "title": self.title,
                "description": self.description,
                "status": self.status.value,
                "priority": self.priority.value if self.priority else None,
                "due_date": self.due_date,
            }
        )


@dataclass
class DeleteTaskResponse:
    message: str
    id: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> DeleteTaskResponse:
        return cls(message=payload.get("message", ""), id=payload.get("id", ""))
