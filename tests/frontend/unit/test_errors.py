"""
Unit tests for the frontend error classifier.

``classify_error`` decides which message the user sees for a failed API
call. Each test pins one step of its fixed precedence order.
"""

from __future__ import annotations

import pytest

from frontend_app.errors import (
    NETWORK_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    ApiError,
    ApiNetworkError,
    ApiResponseError,
    ApiTimeoutError,
    RequestCancelled,
    classify_error,
)

from ..fakes import FakeResponse

pytestmark = pytest.mark.unit

DEFAULT = "Failed to fetch tasks"


class TestClassifyError:
    def test_cancelled_request_has_no_message(self):
        # Act & Assert
        assert classify_error(RequestCancelled("tasks:list"), DEFAULT) is None

    def test_response_body_message_wins(self):
        # Arrange
        error = ApiResponseError(
            FakeResponse(404, {"statusCode": 404, "message": "Task with ID x not found"})
        )

        # Act & Assert
        assert classify_error(error, DEFAULT) == "Task with ID x not found"

    def test_list_of_body_messages_is_joined(self):
        # Arrange
        error = ApiResponseError(
            FakeResponse(400, {"message": ["title should not be empty", "status is invalid"]})
        )

        # Act & Assert
        assert classify_error(error, DEFAULT) == "title should not be empty; status is invalid"

    def test_transport_message_used_without_body_message(self):
        # Arrange
        error = ApiResponseError(FakeResponse(502))

        # Act & Assert
        assert classify_error(error, DEFAULT) == "Request failed with status code 502"

    def test_timeout_uses_its_own_message(self):
        # Act & Assert
        assert classify_error(ApiTimeoutError("timeout of 1s exceeded"), DEFAULT) == (
            "timeout of 1s exceeded"
        )

    def test_sent_request_without_response_is_a_network_error(self):
        # Act & Assert
        assert classify_error(ApiNetworkError(), DEFAULT) == NETWORK_ERROR_MESSAGE

    def test_unsent_request_is_unexpected(self):
        # Act & Assert
        assert classify_error(ApiError(), DEFAULT) == UNEXPECTED_ERROR_MESSAGE

    def test_response_without_any_message_falls_back_to_default(self):
        # Arrange
        error = ApiError(response=FakeResponse(500, {"detail": "n/a"}), request_sent=True)

        # Act & Assert
        assert classify_error(error, DEFAULT) == DEFAULT

    def test_foreign_exception_falls_back_to_default(self):
        # Act & Assert
        assert classify_error(KeyError("data"), DEFAULT) == DEFAULT

    def test_blank_body_message_is_ignored(self):
        # Arrange
        error = ApiResponseError(FakeResponse(500, {"message": "   "}))

        # Act & Assert
        assert classify_error(error, DEFAULT) == "Request failed with status code 500"
