"""
HTTP client for the task REST API.

Wraps a :class:`requests.Session` with the three policies every call
shares:

* **Timeout** -- each attempt is bounded by ``API_TIMEOUT_SECONDS``. A
  timeout surfaces as :class:`ApiTimeoutError` and is not retried.
* **Retry** -- tenacity retries up to ``API_MAX_RETRIES`` times with
  exponential backoff. Connection failures are retried for every method;
  5xx responses only for idempotent methods.
* **Cancellation** -- callers pass a :class:`CancellationToken` issued by
  a :class:`RequestCanceller`. Issuing a new token for a key cancels the
  previous one, so only the newest request for that key completes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import (
    ApiError,
    ApiNetworkError,
    ApiResponseError,
    ApiTimeoutError,
    RequestCancelled,
)
from .models import (
    CreateTaskRequest,
    DeleteTaskResponse,
    GetTasksQuery,
    GetTasksResponse,
    Task,
    UpdateTaskRequest,
)

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})
MAX_BACKOFF_SECONDS = 10


# =====================================================================
# Cancellation
# =====================================================================


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and the client."""

    def __init__(self, key: str | None = None) -> None:
        self.key = key
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelled(self.key)


class RequestCanceller:
    """
    Hands out one live :class:`CancellationToken` per logical key.

    ``issue(key)`` cancels whatever token is still pending under *key*
    before returning a fresh one. Safe to share between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, CancellationToken] = {}

    def issue(self, key: str) -> CancellationToken:
        token = CancellationToken(key)
        with self._lock:
            previous = self._pending.get(key)
            self._pending[key] = token
        if previous is not None:
            logger.debug("Cancelling superseded request %s", key)
            previous.cancel()
        return token

    def release(self, token: CancellationToken) -> None:
        """Forget *token* once its request has settled."""
        with self._lock:
            if token.key is not None and self._pending.get(token.key) is token:
                del self._pending[token.key]

    def cancel(self, key: str) -> None:
        with self._lock:
            token = self._pending.pop(key, None)
        if token is not None:
            token.cancel()

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._pending


# =====================================================================
# Retry policy
# =====================================================================


def is_retryable(method: str) -> Callable[[BaseException], bool]:
    """
    Build the retry predicate for requests sent with *method*.

    Connection failures (request sent, no response) are always retried.
    5xx responses are retried only when *method* is idempotent. Timeouts,
    cancellations and 4xx responses are never retried.
    """
    idempotent = method.upper() in IDEMPOTENT_METHODS

    def predicate(error: BaseException) -> bool:
        if isinstance(error, ApiTimeoutError):
            return False
        if isinstance(error, ApiNetworkError):
            return True
        if isinstance(error, ApiResponseError):
            return idempotent and error.status_code is not None and error.status_code >= 500
        return False

    return predicate


# =====================================================================
# Client
# =====================================================================


class TaskApiClient:
    """
    Typed wrapper around the ``/tasks`` endpoints of the task API.

    Args:
        base_url: API root, e.g. ``http://localhost:3000/api``.
        version: URL version segment appended to *base_url*.
        timeout: Per-attempt timeout in seconds.
        max_retries: Retries after the first attempt.
        retry_backoff: Multiplier for the exponential backoff, in seconds.
        session: Optional pre-built :class:`requests.Session`.
    """

    def __init__(
        self,
        base_url: str,
        version: str = "v1",
        *,
        timeout: float = 30,
        max_retries: int = 3,
        retry_backoff: float = 0.5,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = f"{base_url.rstrip('/')}/{version.strip('/')}"
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(
        self,
        method: str,
        path: str,
        token: CancellationToken | None = None,
        **kwargs: Any,
    ) -> Any:
        """Perform one attempt and map every failure onto an :class:`ApiError`."""
        if token is not None:
            token.raise_if_cancelled()

        try:
            response = self.session.request(
                method, self._url(path), timeout=self.timeout, **kwargs
            )
        except requests.Timeout as exc:
            raise ApiTimeoutError(f"timeout of {self.timeout}s exceeded") from exc
        except requests.ConnectionError as exc:
            raise ApiNetworkError(str(exc)) from exc
        except requests.RequestException as exc:
            raise ApiError(str(exc), request_sent=False) from exc

        # A response that arrives after cancellation is discarded.
        if token is not None:
            token.raise_if_cancelled()

        if not response.ok:
            raise ApiResponseError(response)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "Invalid JSON in response", response=response, request_sent=True
            ) from exc

    def request(
        self,
        method: str,
        path: str,
        token: CancellationToken | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send *method* to *path* under the retry policy and return the JSON body."""
        retrying = Retrying(
            retry=retry_if_exception(is_retryable(method)),
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_backoff, max=MAX_BACKOFF_SECONDS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._send, method, path, token, **kwargs)

    def get_tasks(
        self, query: GetTasksQuery | None = None, token: CancellationToken | None = None
    ) -> GetTasksResponse:
        params = query.to_params() if query else {}
        return GetTasksResponse.from_dict(
            self.request("GET", "tasks", token, params=params)
        )

    def get_task_by_id(self, task_id: str, token: CancellationToken | None = None) -> Task:
        return Task.from_dict(self.request("GET", f"tasks/{quote(task_id, safe='')}", token))

    def create_task(
        self, data: CreateTaskRequest, token: CancellationToken | None = None
    ) -> Task:
        return Task.from_dict(
            self.request("POST", "tasks", token, json=data.to_payload())
        )

    def update_task(
        self, task_id: str, data: UpdateTaskRequest, token: CancellationToken | None = None
    ) -> Task:
        return Task.from_dict(
            self.request(
                "PUT", f"tasks/{quote(task_id, safe='')}", token, json=data.to_payload()
            )
        )

    def delete_task(
        self, task_id: str, token: CancellationToken | None = None
    ) -> DeleteTaskResponse:
        return DeleteTaskResponse.from_dict(
            self.request("DELETE", f"tasks/{quote(task_id, safe='')}", token)
        )
