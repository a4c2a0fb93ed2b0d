"""
Database Models for the Task API.

Defines the SQLAlchemy ORM model for the ``tasks`` table together with
the status and priority enumerations shared by the DTOs.

Key Concepts Demonstrated:
- SQLAlchemy declarative ORM model with typed columns
- ``str, Enum`` inheritance for JSON-friendly enumeration values
- Server-generated UUID primary keys
- Timezone-aware datetime handling (UTC normalisation)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from . import db


class TaskStatus(str, Enum):
    """
    Enumeration of task lifecycle statuses.

    Inherits from ``str`` so members compare equal to the raw strings
    stored in the database column and serialise directly to JSON.
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(str, Enum):
    """Enumeration of task priority levels."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


TITLE_MAX_LENGTH = 255


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """
    Normalise a datetime to UTC.

    SQLite does not store timezone information, so values read back from
    it are naive even though they were written in UTC. Naive datetimes
    are therefore assumed to be UTC; aware ones are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _new_task_id() -> str:
    return str(uuid.uuid4())


class Task(db.Model):
    """
    A unit of work with a status, an optional priority and a due date.

    Attributes:
        id: UUID string assigned at insert, never reused.
        title: Short summary (1 to 255 characters).
        description: Optional free text.
        status: Lifecycle status (see ``TaskStatus``), ``PENDING`` by default.
        priority: Optional importance level (see ``TaskPriority``).
        due_date: Optional deadline (UTC).
        created_at: Timestamp of insertion (UTC).
        updated_at: Timestamp of the last modification (UTC).
    """

    __tablename__ = "tasks"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_task_id)
    title: str = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.PENDING.value,
        index=True,
    )
    priority: str | None = db.Column(db.String(20), nullable=True, index=True)
    due_date: datetime | None = db.Column(
        db.DateTime(timezone=True), nullable=True, index=True
    )
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
