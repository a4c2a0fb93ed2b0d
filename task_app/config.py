"""
Configuration Classes for the Task API.

Centralises all environment-dependent settings (database connection,
CORS origin, rate limit, listen port) into a hierarchy of configuration
classes. The base ``Config`` class defines development defaults, while
subclasses override only what differs per environment.

Every value can be supplied through an environment variable; when a
variable is unset the hard-coded default below is used.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def _env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag such as ``DB_SYNCHRONIZE=true`` from the environment."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def build_database_url() -> str:
    """
    Assemble the PostgreSQL connection string from ``DB_*`` variables.

    ``DATABASE_URL`` wins when it is set, so a single variable can point
    the service at any SQLAlchemy-supported database.

    Returns:
        A SQLAlchemy database URL.
    """
    explicit = os.environ.get("DATABASE_URL", "").strip()
    if explicit:
        return explicit

    username = os.environ.get("DB_USERNAME", "postgres")
    password = os.environ.get("DB_PASSWORD", "postgres")
    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    name = os.environ.get("DB_NAME", "task_management")
    return f"postgresql+psycopg://{username}:{password}@{host}:{port}/{name}"


class Config:
    """
    Base configuration with development-safe defaults.

    Attributes:
        SECRET_KEY: Flask signing key.
        SQLALCHEMY_DATABASE_URI: Database connection string.
        SQLALCHEMY_ECHO: Log every SQL statement (``DB_LOGGING``).
        DB_SYNCHRONIZE: Create missing tables at startup.
        FRONTEND_URL: Origin allowed by the CORS headers.
        PORT: Port used when the service is started directly.
        THROTTLE_TTL: Rate-limit window in milliseconds.
        THROTTLE_LIMIT: Requests each client may send per window.
        RATELIMIT_ENABLED: Turn the global rate limit on or off.
    """

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "task-api-dev-secret-change-in-production"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_DATABASE_URI: str = build_database_url()
    SQLALCHEMY_ECHO: bool = _env_bool("DB_LOGGING")

    DB_SYNCHRONIZE: bool = _env_bool("DB_SYNCHRONIZE")
    FRONTEND_URL: str = os.environ.get("FRONTEND_URL", "http://localhost:5173")
    PORT: int = int(os.environ.get("PORT", "3000"))
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    THROTTLE_TTL: int = int(os.environ.get("THROTTLE_TTL", "60000"))
    THROTTLE_LIMIT: int = int(os.environ.get("THROTTLE_LIMIT", "100"))
    RATELIMIT_ENABLED: bool = _env_bool("RATELIMIT_ENABLED", default=True)
    RATELIMIT_STORAGE_URI: str = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Testing environment configuration.

    Uses an isolated SQLite database and always synchronises the schema
    so tests never need a running PostgreSQL server.
    """

    DEBUG: bool = True
    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'test_tasks.db'}?check_same_thread=False",
    )
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}
    SQLALCHEMY_ECHO: bool = False
    DB_SYNCHRONIZE: bool = True
    ENVIRONMENT: str = "testing"
    # Rate-limit tests enable it on an app of their own.
    RATELIMIT_ENABLED: bool = False


class ProductionConfig(Config):
    """
    Production environment configuration.

    Disables debug mode. All secrets and connection details should be
    supplied through environment variables.
    """

    DEBUG: bool = False
    TESTING: bool = False
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "production")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Look up and return the configuration class for the given environment.

    Args:
        env: Environment name (``"development"``, ``"testing"``,
            ``"production"``). When ``None``, falls back to the
            ``FLASK_ENV`` environment variable, defaulting to
            ``"development"``.

    Returns:
        The configuration class (not an instance) for the environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
