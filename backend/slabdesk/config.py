# backend/slabdesk/config.py
from __future__ import annotations
import os


def _database_url() -> str:
    url = os.environ.get(
        "DATABASE_URL",  # Supabase/Postgres connection string
        "sqlite:///slabdesk.sqlite3",  # default local location
    )
    # Heroku-style URLs use the deprecated "postgres" scheme
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def engine_options_for(url: str) -> dict:
    """
    Connection pool settings.

    Postgres gets the production pool: at most 20 connections, 2 kept warm,
    3s connect timeout and a 30s statement timeout. Other dialects (SQLite in
    tests and local dev) only get pre-ping.
    """
    if not url.startswith("postgresql"):
        return {"pool_pre_ping": True}
    return {
        "pool_pre_ping": True,
        "pool_size": 2,
        "max_overflow": 18,
        "pool_recycle": 60,
        "connect_args": {
            "connect_timeout": 3,
            "options": "-c statement_timeout=30000",
        },
    }


def sales_refresh_enabled(handler: str) -> bool:
    """SALES_REFRESH_ENABLED from the env; defaults to on only when a handler is set."""
    default = "true" if handler else "false"
    return os.environ.get("SALES_REFRESH_ENABLED", default).lower() == "true"


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Supabase signs access tokens with the project JWT secret (HS256)
    SUPABASE_JWT_SECRET = os.environ.get("SUPABASE_JWT_SECRET", "")
    SUPABASE_JWT_AUDIENCE = os.environ.get("SUPABASE_JWT_AUDIENCE", "authenticated")

    CORS_ALLOWED_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    }

    # Background sales refresh (pricing data for newly added cards)
    # Dotted path "package.module:function" called with the global asset id
    SALES_REFRESH_HANDLER = os.environ.get("SALES_REFRESH_HANDLER", "")
    SALES_REFRESH_ENABLED = sales_refresh_enabled(SALES_REFRESH_HANDLER)
    SALES_REFRESH_DELAY_SECONDS = float(os.environ.get("SALES_REFRESH_DELAY_SECONDS", "0.5"))
    # A queued refresh older than this is treated as abandoned
    SALES_REFRESH_CLAIM_SECONDS = int(os.environ.get("SALES_REFRESH_CLAIM_SECONDS", "600"))

    # Celery runs the delayed refresh; Redis is both broker and result store
    CELERY_BROKER_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    CELERY_TASK_ALWAYS_EAGER = False


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for("sqlite:///:memory:")
    SUPABASE_JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!"
    SALES_REFRESH_ENABLED = False
    CELERY_BROKER_URL = "memory://"
    CELERY_RESULT_BACKEND = None
    # Queued tasks run inline, ignoring the countdown
    CELERY_TASK_ALWAYS_EAGER = True
