# Overview: Celery task that refreshes saved sales for one catalog card.

"""Delayed sales refresh for a card that just entered a buying session."""

import logging

from ..services.refresh_service import run_sales_refresh
from .celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def refresh_card_sales(self, asset_id: str):
    """
    Fetch fresh sales for one catalog card through the configured handler.

    Queued by schedule_sales_refresh with a countdown. Failures are retried
    a minute later while the card's refresh claim stays in place.
    """
    logger.info("Starting sales refresh for %s", asset_id)

    try:
        refreshed = run_sales_refresh(asset_id)
        return {
            "status": "success" if refreshed else "skipped",
            "asset_id": asset_id,
        }
    except Exception as e:
        logger.error("Sales refresh failed for %s: %s", asset_id, e)
        self.retry(exc=e, countdown=60)
