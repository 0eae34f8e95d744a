# Overview: Pure shaping of joined session rows + aggregates into API session summaries.

from __future__ import annotations

from typing import Any

from ..time_utils import to_utc_z
from .session_queries import CartAggregate, SessionAggregates, SessionRow


UNKNOWN_EVENT_NAME = "Unknown Event"
UNKNOWN_SELLER_NAME = "—"


def normalize_text(value: Any) -> str | None:
    """Strip free text; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_id(value: Any) -> str | None:
    """Strip a reference id; blank becomes None (clears the reference)."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _event_block(row: SessionRow) -> dict | None:
    if not row.event_id:
        return None
    return {
        "id": row.event_id,
        "name": row.event_name or UNKNOWN_EVENT_NAME,
        "location": row.event_location,
    }


def _seller_block(row: SessionRow) -> dict | None:
    if not row.seller_id:
        return None
    return {
        "id": row.seller_id,
        "contactId": row.contact_id,
        "name": row.seller_name or UNKNOWN_SELLER_NAME,
        "email": row.seller_email,
        "phone": row.seller_phone,
    }


def map_session(row: SessionRow, aggregates: SessionAggregates) -> dict:
    evaluation_count = aggregates.evaluations.get(row.id, 0)
    cart = aggregates.carts.get(row.id) or CartAggregate()

    summary = {
        "id": row.id,
        "sessionNumber": row.offer_number,
        "sellerId": row.seller_id,
        "eventId": row.event_id,
        "notes": row.notes,
        "status": row.status,
        "archived": bool(row.archived),
        "createdAt": to_utc_z(row.created_at),
        "updatedAt": to_utc_z(row.updated_at),
        "evaluationCount": evaluation_count,
        "cartCount": cart.cart_count,
        "assetCount": evaluation_count + cart.cart_count,
        "totalValue": cart.total_value,
        "expectedProfit": cart.expected_profit,
    }

    # No event or seller: the key is left out, not null
    event = _event_block(row)
    if event is not None:
        summary["event"] = event
    seller = _seller_block(row)
    if seller is not None:
        summary["seller"] = seller
    return summary
