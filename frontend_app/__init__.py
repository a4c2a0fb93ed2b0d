"""
Frontend Flask application factory.

Provides the ``create_app`` factory function that assembles the task
manager UI. The service is a stateless Backend-for-Frontend (BFF): it
renders Jinja templates and performs every read and write through the
task REST API using :class:`~frontend_app.api_client.TaskApiClient`.

The BFF never accesses a database directly. Per-browser list filters and
pagination live in the signed session cookie.
"""

from __future__ import annotations

import logging
from datetime import datetime

from flask import Flask, render_template

from .api_client import RequestCanceller, TaskApiClient
from .config import get_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _datetimeformat(value: datetime | None, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


def _page_not_found(error: Exception) -> tuple[str, int]:
    return render_template("not_found.html"), 404


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the frontend application.

    Loads the configuration, builds the shared API client and request
    canceller, and registers the views blueprint.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``). When
            *None*, the value is read from the ``FLASK_ENV`` environment
            variable, defaulting to ``"development"``.

    Returns:
        A fully configured :class:`~flask.Flask` application instance.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info("Creating frontend app with config: %s", config_class.__name__)

    app.extensions["task_api_client"] = TaskApiClient(
        app.config["API_BASE_URL"],
        app.config["API_URL_VERSION"],
        timeout=app.config["API_TIMEOUT_SECONDS"],
        max_retries=app.config["API_MAX_RETRIES"],
        retry_backoff=app.config["API_RETRY_BACKOFF_SECONDS"],
    )
    app.extensions["task_canceller"] = RequestCanceller()
    app.jinja_env.filters["datetimeformat"] = _datetimeformat

    from .routes.views import views_bp

    app.register_blueprint(views_bp)
    app.register_error_handler(404, _page_not_found)
    return app
