"""Celery tasks."""

from .celery_app import celery_app, init_celery
from .refresh_sales import refresh_card_sales

__all__ = [
    "celery_app",
    "init_celery",
    "refresh_card_sales",
]
