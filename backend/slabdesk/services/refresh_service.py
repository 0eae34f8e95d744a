# Overview: Fire-and-forget background refresh of card sales after a card enters a session.

"""
Sales refresh scheduling.

Adding a card to a buying session should make pricing data appear soon
after. Cards that already have saved sales are priced instantly and need no
refresh. Otherwise a refresh_card_sales Celery task is queued with a
countdown; the worker calls the configured SALES_REFRESH_HANDLER
("pkg.module:func", called with the global asset id) and stamps
last_pricing_update on the card.

A card has at most one queued refresh. Scheduling claims the card by
stamping sales_refresh_requested_at in a single conditional UPDATE, so the
claim holds across every web instance sharing the database. The worker
releases it when the refresh ends; a claim older than
SALES_REFRESH_CLAIM_SECONDS is treated as abandoned.

Scheduling never raises into the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from sqlalchemy import or_
from werkzeug.utils import import_string

from ..extensions import db
from ..models import CardSale, GlobalAsset
from ..time_utils import utcnow


logger = logging.getLogger(__name__)

DEFAULT_CLAIM_SECONDS = 600


@dataclass
class RefreshResult:
    success: bool
    message: str
    instant: bool = False
    sales_count: int = 0
    task_id: str | None = None


def _load_handler(app):
    path = app.config.get("SALES_REFRESH_HANDLER") or ""
    if not path:
        return None
    return import_string(path)


def claim_refresh(asset_id: str) -> bool:
    """Mark a refresh as queued for the card. False when a live claim exists."""
    now = utcnow()
    ttl = current_app.config.get("SALES_REFRESH_CLAIM_SECONDS", DEFAULT_CLAIM_SECONDS)
    cutoff = now - timedelta(seconds=ttl)

    claimed = (
        db.session.query(GlobalAsset)
        .filter(GlobalAsset.id == asset_id)
        .filter(or_(
            GlobalAsset.sales_refresh_requested_at.is_(None),
            GlobalAsset.sales_refresh_requested_at < cutoff,
        ))
        .update({GlobalAsset.sales_refresh_requested_at: now}, synchronize_session=False)
    )
    db.session.commit()
    return claimed == 1


def release_refresh(asset_id: str) -> None:
    (
        db.session.query(GlobalAsset)
        .filter(GlobalAsset.id == asset_id)
        .update({GlobalAsset.sales_refresh_requested_at: None}, synchronize_session=False)
    )
    db.session.commit()


def run_sales_refresh(asset_id: str) -> bool:
    """
    Worker side of a refresh; needs an app context.

    Returns False when no handler is configured. A failing handler leaves
    the claim in place for the task's retries and re-raises.
    """
    handler = _load_handler(current_app)
    if handler is None:
        logger.info("No sales refresh handler configured; skipped %s", asset_id)
        release_refresh(asset_id)
        return False

    try:
        handler(asset_id)
    except Exception:
        db.session.rollback()
        raise

    asset = db.session.get(GlobalAsset, asset_id)
    if asset is not None:
        asset.last_pricing_update = utcnow()
        asset.sales_refresh_requested_at = None
        db.session.commit()
    logger.info("Background sales refresh completed for %s", asset_id)
    return True


def schedule_sales_refresh(asset_id: str, delay_seconds: float | None = None) -> RefreshResult:
    """Queue a delayed sales refresh for a catalog card (see module docstring)."""
    try:
        if not current_app.config.get("SALES_REFRESH_ENABLED", False):
            return RefreshResult(success=True, message="Sales refresh disabled")

        asset = db.session.get(GlobalAsset, asset_id)
        if asset is None:
            logger.info("Sales refresh skipped: card %s not found", asset_id)
            return RefreshResult(success=False, message="Card not found")

        existing = (
            db.session.query(CardSale.id)
            .filter(CardSale.card_id == asset.pricing_key)
            .count()
        )
        if existing:
            return RefreshResult(
                success=True,
                message=f"Instant pricing available: using existing {existing} sales records",
                instant=True,
                sales_count=existing,
            )

        if not claim_refresh(asset_id):
            return RefreshResult(success=True, message="Refresh already scheduled")

        if delay_seconds is None:
            delay_seconds = current_app.config.get("SALES_REFRESH_DELAY_SECONDS", 0.5)

        from ..tasks.refresh_sales import refresh_card_sales

        try:
            task = refresh_card_sales.apply_async(args=[asset_id], countdown=delay_seconds)
        except Exception:
            release_refresh(asset_id)
            raise

        logger.info("Queued sales refresh %s for %s", task.id, asset_id)
        return RefreshResult(success=True, message="Background refresh scheduled", task_id=task.id)

    except Exception:
        logger.exception("Failed to schedule sales refresh for %s", asset_id)
        db.session.rollback()
        return RefreshResult(success=False, message="Error scheduling refresh")
