"""
Shared pytest fixtures for task API tests.

Provides the Flask application, test client, database session and
reusable data factories used by the unit, integration and contract
suites.

Key SDET Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures for performance and isolation
- Factory pattern (task_factory) for flexible test-data creation
- Fixture teardown / cleanup to prevent test pollution
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from faker import Faker

os.environ["FLASK_ENV"] = "testing"

from task_app import create_app, db
from task_app.models import Task, TaskPriority, TaskStatus

fake = Faker()


@pytest.fixture(scope="session")
def app():
    """
    Provide the Flask application instance for the entire test session.

    Creates the app once using the 'testing' configuration and shares it
    across all tests so the application factory is not invoked repeatedly.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client scoped to a single test function."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database session for each test function.

    Creates all tables before the test, yields the db instance for use,
    then rolls back any uncommitted changes and drops all tables to
    guarantee a pristine state for the next test.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def api_headers() -> dict[str, str]:
    """JSON request headers for the task API."""
    return {"Content-Type": "application/json", "Accept": "application/json"}


@pytest.fixture
def task_factory(db_session):
    """
    Factory fixture that creates Task rows in the test database.

    Returns a callable ``_create_task(**kwargs)`` that inserts a task with
    sensible defaults (generated via Faker) and commits it. Passing
    ``created_at`` pins the row's position in the newest-first ordering.
    """

    def _create_task(
        *,
        title: str | None = None,
        description: str | None = None,
        status: str = TaskStatus.PENDING.value,
        priority: str | None = TaskPriority.MEDIUM.value,
        due_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> Task:
        created = created_at or datetime.now(timezone.utc)
        task = Task(
            title=title or fake.sentence(nb_words=4),
            description=description if description is not None else fake.paragraph(),
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=created,
            updated_at=created,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    yield _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """Create a single task with known, predictable values."""
    return task_factory(
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.PENDING.value,
        priority=TaskPriority.MEDIUM.value,
    )


@pytest.fixture
def multiple_tasks(task_factory) -> list[Task]:
    """
    Create four tasks with distinct status, priority and creation times.

    Returned oldest first; the list endpoint returns them newest first.
    """
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return [
        task_factory(
            title="High Priority Pending",
            description="Prepare the quarterly report",
            status=TaskStatus.PENDING.value,
            priority=TaskPriority.HIGH.value,
            due_date=base + timedelta(days=1),
            created_at=base,
        ),
        task_factory(
            title="Medium Priority In Progress",
            description="Review pull requests",
            status=TaskStatus.IN_PROGRESS.value,
            priority=TaskPriority.MEDIUM.value,
            created_at=base + timedelta(hours=1),
        ),
        task_factory(
            title="Low Priority Completed",
            description="Archive old tickets",
            status=TaskStatus.COMPLETED.value,
            priority=TaskPriority.LOW.value,
            created_at=base + timedelta(hours=2),
        ),
        task_factory(
            title="High Priority In Progress",
            description="Fix the REPORT export",
            status=TaskStatus.IN_PROGRESS.value,
            priority=TaskPriority.HIGH.value,
            due_date=base + timedelta(days=7),
            created_at=base + timedelta(hours=3),
        ),
    ]


@pytest.fixture
def valid_task_data() -> dict[str, Any]:
    """Provide a complete, valid task payload dictionary."""
    return {
        "title": "Test Task",
        "description": "This is a test task description",
        "status": TaskStatus.PENDING.value,
        "priority": TaskPriority.MEDIUM.value,
        "due_date": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
    }

