"""
Shared pytest fixtures for frontend tests.

Provides the Flask application, HTTP client and a scripted stand-in for
the task API. Because the frontend BFF is stateless (no database), every
downstream call is answered by monkeypatching the shared
:class:`requests.Session` of the API client.

Key SDET Concepts Demonstrated:
- Fixture scoping (session vs. function) for performance and isolation
- Fake response objects as lightweight test doubles
- Recording outbound calls for later assertions
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest
import requests

os.environ["FLASK_ENV"] = "testing"

from frontend_app import create_app

from .fakes import FakeTaskApi


@pytest.fixture(scope="session")
def app():
    """Provide the frontend application for the entire test session."""
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a Flask test client scoped to a single test function."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def fake_api(app, monkeypatch) -> FakeTaskApi:
    """Route every task API call made by the app through a FakeTaskApi."""
    fake = FakeTaskApi()
    monkeypatch.setattr(app.extensions["task_api_client"].session, "request", fake)
    return fake


@pytest.fixture
def connection_error() -> Callable[[], requests.ConnectionError]:
    return lambda: requests.ConnectionError("Connection refused")

