# Overview: Flask API routes for system health and version; no authentication required.

"""
System health and version endpoints.

Provides health checks for the database and the background sales refresh
configuration, and version information for deployment debugging.
"""

import sys
import time
from flask import Blueprint, current_app
from sqlalchemy import text
from ..extensions import db
from ..models import BuySession
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and that the buying desk tables answer.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        session_count = db.session.query(BuySession).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "dialect": db.engine.dialect.name,
                "buy_sessions": session_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_sales_refresh_health() -> dict:
    """Refresh is degraded (still operational) when enabled without a handler."""
    enabled = bool(current_app.config.get("SALES_REFRESH_ENABLED"))
    handler = current_app.config.get("SALES_REFRESH_HANDLER") or None

    if enabled and not handler:
        return {
            "status": "degraded",
            "warning": "SALES_REFRESH_HANDLER not configured",
            "details": {"enabled": enabled},
        }

    return {
        "status": "healthy",
        "details": {"enabled": enabled, "handler": handler},
    }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    refresh_health = check_sales_refresh_health()

    all_checks = [database_health, refresh_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status = "unhealthy"
        http_status = 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round(total_elapsed_ms, 2),
        "checks": {
            "database": database_health,
            "sales_refresh": refresh_health,
        }
    }

    return response, http_status


@system_bp.get("/version")
def version():
    """
    Version endpoint for deployment debugging.

    Does NOT expose secret keys, database credentials or internal paths.
    """
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": "1.0.0",
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
