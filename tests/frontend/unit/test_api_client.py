"""
Unit tests for the task API client.

The client's :class:`requests.Session` is replaced by a scripted
``FakeTaskApi`` so the retry, timeout and cancellation policies can be
exercised without a network.

Key SDET Concepts Demonstrated:
- Test doubles injected through monkeypatch
- Verifying retry counts by recording outbound calls
- Negative testing of transport failures
"""

from __future__ import annotations

import pytest
import requests

from frontend_app.api_client import (
    CancellationToken,
    RequestCanceller,
    TaskApiClient,
    is_retryable,
)
from frontend_app.errors import (
    ApiError,
    ApiNetworkError,
    ApiResponseError,
    ApiTimeoutError,
    RequestCancelled,
)
from frontend_app.models import (
    CreateTaskRequest,
    GetTasksQuery,
    TaskPriority,
    TaskStatus,
    UpdateTaskRequest,
)

from ..fakes import FakeResponse, FakeTaskApi, make_page, make_task

pytestmark = pytest.mark.unit

TASK_ID = "123e4567-e89b-12d3-a456-426614174000"


@pytest.fixture
def fake() -> FakeTaskApi:
    return FakeTaskApi()


@pytest.fixture
def api(fake, monkeypatch) -> TaskApiClient:
    client = TaskApiClient("http://task-api.test/api/", timeout=1, retry_backoff=0)
    monkeypatch.setattr(client.session, "request", fake)
    return client


class TestRequestBuilding:
    def test_base_url_includes_version(self):
        # Act
        client = TaskApiClient("http://localhost:3000/api/", "v2")

        # Assert
        assert client.base_url == "http://localhost:3000/api/v2"
        assert client.session.headers["Content-Type"] == "application/json"

    def test_get_tasks_sends_only_set_params(self, api, fake):
        # Arrange
        fake.add("GET", "/tasks", FakeResponse(200, make_page([make_task()])))

        # Act
        response = api.get_tasks(GetTasksQuery(page=2, status=TaskStatus.PENDING))

        # Assert
        assert fake.calls[0]["params"] == {"page": 2, "status": "PENDING"}
        assert fake.calls[0]["timeout"] == 1
        assert response.data[0].title == "Buy milk"
        assert response.meta.total == 1

    def test_task_id_is_url_encoded(self, api, fake):
        # Arrange
        fake.add("GET", "/tasks/a%2Fb", FakeResponse(200, make_task(id="a/b")))

        # Act
        task = api.get_task_by_id("a/b")

        # Assert
        assert task.id == "a/b"

    def test_create_task_omits_unset_fields(self, api, fake):
        # Arrange
        fake.add("POST", "/tasks", FakeResponse(201, make_task()))

        # Act
        api.create_task(CreateTaskRequest(title="Buy milk", priority=TaskPriority.HIGH))

        # Assert
        assert fake.calls[0]["json"] == {"title": "Buy milk", "priority": "HIGH"}

    def test_update_task_always_sends_status(self, api, fake):
        # Arrange
        fake.add(
            "PUT", f"/tasks/{TASK_ID}", FakeResponse(200, make_task(status="COMPLETED"))
        )

        # Act
        task = api.update_task(
            TASK_ID, UpdateTaskRequest(title="Buy milk", status=TaskStatus.COMPLETED)
        )

        # Assert
        assert fake.calls[0]["json"] == {"title": "Buy milk", "status": "COMPLETED"}
        assert task.status is TaskStatus.COMPLETED

    def test_delete_task_returns_confirmation(self, api, fake):
        # Arrange
        fake.add(
            "DELETE",
            f"/tasks/{TASK_ID}",
            FakeResponse(200, {"message": "Task deleted successfully", "id": TASK_ID}),
        )

        # Act
        result = api.delete_task(TASK_ID)

        # Assert
        assert result.id == TASK_ID
        assert result.message == "Task deleted successfully"

    def test_invalid_json_body_raises_api_error(self, api, fake):
        # Arrange
        fake.add("GET", f"/tasks/{TASK_ID}", FakeResponse(200))

        # Act & Assert
        with pytest.raises(ApiError, match="Invalid JSON"):
            api.get_task_by_id(TASK_ID)


class TestRetryPolicy:
    def test_get_is_retried_on_server_error(self, api, fake):
        """Test that a 503 followed by a 200 succeeds on the second attempt."""
        # Arrange
        fake.add(
            "GET",
            "/tasks",
            FakeResponse(503, {"message": "unavailable"}),
            FakeResponse(200, make_page([])),
        )

        # Act
        response = api.get_tasks()

        # Assert
        assert response.data == []
        assert len(fake.calls_to("GET", "/tasks")) == 2

    def test_get_gives_up_after_max_retries(self, api, fake):
        # Arrange
        fake.add("GET", "/tasks", FakeResponse(500, {"message": "boom"}))

        # Act
        with pytest.raises(ApiResponseError) as exc_info:
            api.get_tasks()

        # Assert
        assert exc_info.value.status_code == 500
        assert len(fake.calls) == api.max_retries + 1

    def test_post_is_not_retried_on_server_error(self, api, fake):
        # Arrange
        fake.add("POST", "/tasks", FakeResponse(500, {"message": "boom"}))

        # Act
        with pytest.raises(ApiResponseError):
            api.create_task(CreateTaskRequest(title="Buy milk"))

        # Assert
        assert len(fake.calls) == 1

    def test_client_errors_are_not_retried(self, api, fake):
        # Arrange
        fake.add("GET", f"/tasks/{TASK_ID}", FakeResponse(404, {"message": "not found"}))

        # Act
        with pytest.raises(ApiResponseError):
            api.get_task_by_id(TASK_ID)

        # Assert
        assert len(fake.calls) == 1

    def test_connection_error_is_retried_for_post(self, api, fake):
        # Arrange
        fake.add(
            "POST",
            "/tasks",
            requests.ConnectionError("Connection refused"),
            FakeResponse(201, make_task()),
        )

        # Act
        task = api.create_task(CreateTaskRequest(title="Buy milk"))

        # Assert
        assert task.title == "Buy milk"
        assert len(fake.calls) == 2

    def test_connection_error_surfaces_as_network_error(self, api, fake):
        # Arrange
        fake.add("GET", "/tasks", requests.ConnectionError("Connection refused"))

        # Act & Assert
        with pytest.raises(ApiNetworkError) as exc_info:
            api.get_tasks()
        assert exc_info.value.request_sent is True
        assert exc_info.value.response is None

    def test_timeout_is_not_retried(self, api, fake):
        # Arrange
        fake.add("GET", "/tasks", requests.ReadTimeout("read timed out"))

        # Act
        with pytest.raises(ApiTimeoutError):
            api.get_tasks()

        # Assert
        assert len(fake.calls) == 1

    def test_unsendable_request_is_not_retried(self, api, fake):
        # Arrange
        fake.add("GET", "/tasks", requests.exceptions.InvalidURL("bad url"))

        # Act
        with pytest.raises(ApiError) as exc_info:
            api.get_tasks()

        # Assert
        assert exc_info.value.request_sent is False
        assert len(fake.calls) == 1

    @pytest.mark.parametrize(
        ("method", "expected"),
        [("GET", True), ("put", True), ("DELETE", True), ("POST", False), ("PATCH", False)],
    )
    def test_server_errors_retried_only_for_idempotent_methods(self, method, expected):
        # Arrange
        error = ApiResponseError(FakeResponse(502))

        # Act & Assert
        assert is_retryable(method)(error) is expected

    def test_cancellation_is_never_retried(self):
        # Act & Assert
        assert is_retryable("GET")(RequestCancelled("tasks:list")) is False


class TestCancellation:
    def test_cancelled_token_prevents_the_call(self, api, fake):
        # Arrange
        token = CancellationToken("tasks:list")
        token.cancel()

        # Act
        with pytest.raises(RequestCancelled):
            api.get_tasks(token=token)

        # Assert
        assert fake.calls == []

    def test_response_after_cancellation_is_discarded(self, api, monkeypatch):
        """Test that a response arriving after cancel() is not returned."""
        # Arrange
        token = CancellationToken("tasks:list")

        def _respond_then_cancel(method, url, **kwargs):
            token.cancel()
            return FakeResponse(200, make_page([make_task()]))

        monkeypatch.setattr(api.session, "request", _respond_then_cancel)

        # Act & Assert
        with pytest.raises(RequestCancelled):
            api.get_tasks(token=token)

    def test_issue_cancels_previous_token_for_same_key(self):
        # Arrange
        canceller = RequestCanceller()
        first = canceller.issue("tasks:list")

        # Act
        second = canceller.issue("tasks:list")

        # Assert
        assert first.cancelled is True
        assert second.cancelled is False
        assert canceller.is_pending("tasks:list") is True

    def test_keys_are_independent(self):
        # Arrange
        canceller = RequestCanceller()
        listing = canceller.issue("tasks:list")

        # Act
        canceller.issue("tasks:detail")

        # Assert
        assert listing.cancelled is False

    def test_release_forgets_only_the_current_token(self):
        # Arrange
        canceller = RequestCanceller()
        first = canceller.issue("tasks:list")
        canceller.issue("tasks:list")

        # Act
        canceller.release(first)

        # Assert
        assert canceller.is_pending("tasks:list") is True

    def test_cancel_by_key(self):
        # Arrange
        canceller = RequestCanceller()
        token = canceller.issue("tasks:list")

        # Act
        canceller.cancel("tasks:list")

        # Assert
        assert token.cancelled is True
        assert canceller.is_pending("tasks:list") is False
