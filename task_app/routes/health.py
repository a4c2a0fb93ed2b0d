"""
Health-check endpoints for load balancers and orchestrators.

Endpoints (mounted under ``/api``):
    GET /                  - Shallow status probe
    GET /health            - Full check (database ping)
    GET /health/liveness   - Process is up
    GET /health/readiness  - Database is reachable
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from flask import Blueprint, Response, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


def _database_indicator() -> dict[str, Any]:
    """Ping the database and report ``up`` or ``down``."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        return {"status": "down", "message": str(exc)}
    return {"status": "up"}


def _health_report() -> tuple[Response, int]:
    database = _database_indicator()
    healthy = database["status"] == "up"
    return (
        jsonify(
            {
                "status": "ok" if healthy else "error",
                "service": "tasks",
                "environment": current_app.config.get("ENVIRONMENT", "unknown"),
                "details": {"database": database},
            }
        ),
        200 if healthy else 503,
    )


@health_bp.route("", methods=["GET"], strict_slashes=False)
def root_status() -> tuple[Response, int]:
    return jsonify({"status": "ok"}), 200


@health_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """
    Return service health status including the database connection.

    Returns:
        200 with ``status: ok`` when the database answers, 503 otherwise.
    """
    return _health_report()


@health_bp.route("/health/liveness", methods=["GET"])
def liveness() -> tuple[Response, int]:
    return (
        jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}),
        200,
    )


@health_bp.route("/health/readiness", methods=["GET"])
def readiness() -> tuple[Response, int]:
    """Report whether the service can take traffic (database reachable)."""
    return _health_report()
