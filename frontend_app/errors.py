"""
Error types raised by the task API client and the message classifier
used by the task store.

The client never lets a raw :mod:`requests` exception escape. Every
failure is wrapped in one of the types below, which record whether the
request actually left the process and, if a response arrived, that
response:

* :class:`ApiResponseError` -- the API answered with a non-2xx status.
* :class:`ApiNetworkError` -- the request was sent but nothing came back.
* :class:`ApiTimeoutError` -- no answer within the client timeout.
* :class:`RequestCancelled` -- the caller cancelled the request.
* :class:`ApiError` itself -- the request could not be sent at all.
"""

from __future__ import annotations

from typing import Any

import requests

NETWORK_ERROR_MESSAGE = "Network error: no response received from the server"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while sending the request"


class ApiError(Exception):
    """
    Failure of a task API call.

    Attributes:
        message: Transport-level description of the failure (may be empty).
        response: The HTTP response, when one was received.
        request_sent: Whether the request left the client.
    """

    def __init__(
        self,
        message: str = "",
        *,
        response: requests.Response | None = None,
        request_sent: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.response = response
        self.request_sent = request_sent

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None

    def response_body(self) -> Any:
        """Return the decoded JSON body of the response, or ``None``."""
        if self.response is None:
            return None
        try:
            return self.response.json()
        except ValueError:
            return None


class ApiResponseError(ApiError):
    """The API answered with an error status."""

    def __init__(self, response: requests.Response) -> None:
        super().__init__(
            f"Request failed with status code {response.status_code}",
            response=response,
            request_sent=True,
        )


class ApiNetworkError(ApiError):
    """The request was sent but no response was received."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message, request_sent=True)


class ApiTimeoutError(ApiNetworkError):
    """The client timeout elapsed before the API answered."""


class RequestCancelled(ApiError):
    """The request was cancelled by its caller."""

    def __init__(self, key: str | None = None) -> None:
        super().__init__("Request cancelled", request_sent=False)
        self.key = key


def is_cancel(error: BaseException) -> bool:
    """Return True when *error* represents a caller-initiated cancellation."""
    return isinstance(error, RequestCancelled)


def message_from_body(body: Any) -> str | None:
    """Return the non-blank ``message`` of an error body, joining lists with ``; ``."""
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    if isinstance(message, list):
        message = "; ".join(str(item) for item in message if item)
    if isinstance(message, str) and message.strip():
        return message
    return None


def classify_error(error: BaseException, default: str) -> str | None:
    """
    Turn a failed API call into the message shown to the user.

    The checks run in a fixed order:

    1. Cancelled requests yield ``None`` (nothing to show).
    2. A response body carrying ``message`` yields that message.
    3. A non-empty transport message is used as-is.
    4. A request that was sent but got no response yields
       :data:`NETWORK_ERROR_MESSAGE`.
    5. A request that never left the client yields
       :data:`UNEXPECTED_ERROR_MESSAGE`.
    6. Anything else yields *default*.

    Exceptions that are not :class:`ApiError` always yield *default*.
    """
    if is_cancel(error):
        return None
    if not isinstance(error, ApiError):
        return default

    body_message = message_from_body(error.response_body())
    if body_message:
        return body_message
    if error.message:
        return error.message
    if error.request_sent and error.response is None:
        return NETWORK_ERROR_MESSAGE
    if not error.request_sent:
        return UNEXPECTED_ERROR_MESSAGE
    return default
