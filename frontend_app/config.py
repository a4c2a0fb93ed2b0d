"""
Configuration classes for the frontend service.

The frontend is a stateless BFF (backend-for-frontend). It serves
server-rendered HTML and delegates every task operation to the task API
over HTTP, so its settings are mostly about reaching that API.
"""

from __future__ import annotations

import os


class Config:
    """Base configuration for all frontend environments."""

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "frontend-dev-secret-change-in-production"
    )

    API_BASE_URL: str = os.environ.get("API_BASE_URL", "http://localhost:3000/api")
    API_URL_VERSION: str = os.environ.get("API_URL_VERSION", "v1")
    API_TIMEOUT_SECONDS: float = float(os.environ.get("API_TIMEOUT_SECONDS", "30"))
    API_MAX_RETRIES: int = int(os.environ.get("API_MAX_RETRIES", "3"))
    API_RETRY_BACKOFF_SECONDS: float = float(
        os.environ.get("API_RETRY_BACKOFF_SECONDS", "0.5")
    )
    FRONTEND_PORT: int = int(os.environ.get("FRONTEND_PORT", "5173"))

    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")


class DevelopmentConfig(Config):
    """Configuration for local development."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Configuration for automated tests; no real API is contacted."""

    DEBUG: bool = True
    TESTING: bool = True

    API_BASE_URL: str = os.environ.get("TEST_API_BASE_URL", "http://task-api.test/api")
    API_TIMEOUT_SECONDS: float = 1
    API_RETRY_BACKOFF_SECONDS: float = 0


class ProductionConfig(Config):
    """Configuration for production deployments."""

    DEBUG: bool = False
    TESTING: bool = False
    SESSION_COOKIE_SECURE: bool = (
        os.environ.get("SESSION_COOKIE_SECURE", "true").strip().lower() == "true"
    )


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
        env: Environment name. When None, falls back to FLASK_ENV.

    Returns:
        The selected configuration class.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
