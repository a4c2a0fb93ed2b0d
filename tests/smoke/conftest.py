"""
Smoke-test fixtures wiring the frontend to a real task API.

The frontend's :class:`requests.Session` is routed into the task API's
Flask test client, so a smoke test drives both tiers in-process without
mocking either of them.

Key SDET Concepts Demonstrated:
- Connecting two services through an in-process transport adapter
- Session-scoped applications with a per-test clean database
"""

from __future__ import annotations

import os
from typing import Any

import pytest

os.environ["FLASK_ENV"] = "testing"

import frontend_app
import task_app
from task_app import db


class _TestClientTransport:
    """Forward ``requests.Session.request`` calls to a Flask test client."""

    def __init__(self, api_client, base_url: str) -> None:
        self.api_client = api_client
        self.origin = base_url.split("/api", 1)[0]

    def __call__(self, method: str, url: str, **kwargs: Any) -> _TestClientResponse:
        path = url[len(self.origin):]
        response = self.api_client.open(
            path,
            method=method,
            query_string=kwargs.get("params"),
            json=kwargs.get("json"),
        )
        return _TestClientResponse(response)


class _TestClientResponse:
    """Expose a Flask test response through the ``requests.Response`` surface."""

    def __init__(self, response) -> None:
        self._response = response
        self.status_code = response.status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        payload = self._response.get_json(silent=True)
        if payload is None:
            raise ValueError("No JSON body")
        return payload


@pytest.fixture(scope="session")
def api_app():
    return task_app.create_app("testing")


@pytest.fixture(scope="session")
def frontend():
    return frontend_app.create_app("testing")


@pytest.fixture
def stack(api_app, frontend, monkeypatch):
    """
    Yield a frontend test client backed by a live task API.

    Tables are created before the test and dropped afterwards.
    """
    with api_app.app_context():
        db.create_all()

    api_client = frontend.extensions["task_api_client"]
    api_test_client = api_app.test_client()
    monkeypatch.setattr(
        api_client.session,
        "request",
        _TestClientTransport(api_test_client, frontend.config["API_BASE_URL"]),
    )
    with frontend.test_client() as frontend_client:
        yield frontend_client

    with api_app.app_context():
        db.session.remove()
        db.drop_all()
