"""
Task API Flask Application Factory.

Provides the ``create_app`` factory function that assembles the task
REST service. The factory pattern allows multiple application instances
with different configurations (development, testing, production) to
coexist in the same process.

The service registers three blueprints:
  * **tasks_v1** -- versioned CRUD endpoints mounted at ``/api/v1``.
  * **health** -- status, liveness and readiness probes under ``/api``.
  * **docs** -- the generated OpenAPI document and Swagger UI under ``/api``.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from flask import Flask, Response, g, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy

from .config import get_config

db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ALLOWED_METHODS = "GET, HEAD, PUT, PATCH, POST, DELETE, OPTIONS"
CORS_ALLOWED_HEADERS = "Content-Type, Authorization"


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def _install_cors(app: Flask) -> None:
    """Allow the configured frontend origin to call the API with credentials."""

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        origin = request.headers.get("Origin")
        if origin and origin == app.config.get("FRONTEND_URL"):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers.add("Vary", "Origin")
            if request.method == "OPTIONS":
                response.headers["Access-Control-Allow-Methods"] = CORS_ALLOWED_METHODS
                response.headers["Access-Control-Allow-Headers"] = CORS_ALLOWED_HEADERS
        return response


def _install_request_logging(app: Flask) -> None:
    """Log one line per request with its status and duration."""

    @app.before_request
    def start_timer() -> None:
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response: Response) -> Response:
        started = g.get("request_started")
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s %s - %.0fms",
                request.method,
                request.path,
                response.status_code,
                elapsed_ms,
            )
        return response


def _install_rate_limiting(app: Flask) -> Limiter:
    """
    Apply one global request budget per client address.

    ``THROTTLE_LIMIT`` requests are allowed per ``THROTTLE_TTL``
    milliseconds. A request over the budget is answered with 429 in the
    common JSON error shape. ``RATELIMIT_ENABLED`` and
    ``RATELIMIT_STORAGE_URI`` are read by Flask-Limiter itself.
    """
    window_seconds = max(1, app.config["THROTTLE_TTL"] // 1000)
    limit = f"{app.config['THROTTLE_LIMIT']} per {window_seconds} second"
    return Limiter(
        get_remote_address,
        app=app,
        default_limits=[limit],
        headers_enabled=True,
    )


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the task API application.

    Instantiates the Flask app, loads the appropriate configuration object,
    initialises SQLAlchemy, registers the blueprints and error handlers,
    applies the global rate limit, and creates missing tables when
    ``DB_SYNCHRONIZE`` is on.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``). When *None*,
            the value is read from the ``FLASK_ENV`` environment variable,
            defaulting to ``"development"``.

    Returns:
        A fully configured Flask application instance ready to serve requests.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info("Creating task API app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)

    from .errors import register_error_handlers
    from .routes.docs import docs_bp
    from .routes.health import health_bp
    from .tasks_module import register_tasks_module

    register_tasks_module(app)
    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(docs_bp, url_prefix="/api")
    register_error_handlers(app)

    _install_request_logging(app)
    _install_rate_limiting(app)
    _install_cors(app)

    if app.config.get("DB_SYNCHRONIZE"):
        with app.app_context():
            db.create_all()
            logger.info("Task API database tables created")

    return app
