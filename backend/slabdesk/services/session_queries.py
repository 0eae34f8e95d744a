# Overview: Read queries for buying desk sessions: joined session rows and per-session aggregates.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func

from ..extensions import db
from ..models import BuySession, CartEntry, Contact, EvaluationAsset, Event, Seller
from ..models.common import to_number


@dataclass
class SessionRow:
    """One session joined with its event and seller contact (all joins optional)."""
    id: str
    offer_number: str
    event_id: str | None
    notes: str | None
    status: str
    archived: bool
    created_at: datetime | None
    updated_at: datetime | None
    event_name: str | None = None
    event_location: str | None = None
    seller_id: str | None = None
    contact_id: str | None = None
    seller_name: str | None = None
    seller_email: str | None = None
    seller_phone: str | None = None


@dataclass
class CartAggregate:
    cart_count: int = 0
    total_value: float = 0.0
    expected_profit: float = 0.0


@dataclass
class SessionAggregates:
    evaluations: dict[str, int] = field(default_factory=dict)
    carts: dict[str, CartAggregate] = field(default_factory=dict)


def fetch_session_rows(
    user_id: str,
    session_id: str | None = None,
    event_id: str | None = None,
    archived: bool | None = None,
) -> list[SessionRow]:
    """Owner-scoped sessions, newest first. Filters apply only when given."""
    query = (
        db.session.query(
            BuySession.id.label("id"),
            BuySession.offer_number.label("offer_number"),
            BuySession.event_id.label("event_id"),
            BuySession.notes.label("notes"),
            BuySession.status.label("status"),
            BuySession.archived.label("archived"),
            BuySession.created_at.label("created_at"),
            BuySession.updated_at.label("updated_at"),
            Event.name.label("event_name"),
            Event.location.label("event_location"),
            BuySession.seller_id.label("seller_id"),
            Seller.contact_id.label("contact_id"),
            Contact.name.label("seller_name"),
            Contact.email.label("seller_email"),
            Contact.phone.label("seller_phone"),
        )
        .outerjoin(Event, BuySession.event_id == Event.id)
        .outerjoin(Seller, BuySession.seller_id == Seller.id)
        .outerjoin(Contact, Seller.contact_id == Contact.id)
        .filter(BuySession.user_id == user_id)
    )

    if session_id:
        query = query.filter(BuySession.id == session_id)
    if event_id:
        query = query.filter(BuySession.event_id == event_id)
    if archived is not None:
        query = query.filter(BuySession.archived.is_(archived))

    rows = query.order_by(BuySession.created_at.desc()).all()
    return [SessionRow(**row._asdict()) for row in rows]


def fetch_aggregates(session_ids: list[str]) -> SessionAggregates:
    """
    Evaluation counts and cart rollups for the given sessions.

    Sessions without rows are simply absent from the maps. An empty id list
    returns empty maps without touching the database.
    """
    if not session_ids:
        return SessionAggregates()

    evaluation_rows = (
        db.session.query(
            EvaluationAsset.buy_offer_id,
            func.count(EvaluationAsset.id),
        )
        .filter(EvaluationAsset.buy_offer_id.in_(session_ids))
        .group_by(EvaluationAsset.buy_offer_id)
        .all()
    )

    cart_rows = (
        db.session.query(
            CartEntry.buy_offer_id,
            func.count(CartEntry.id),
            func.coalesce(func.sum(CartEntry.offer_price), 0),
            func.coalesce(func.sum(CartEntry.expected_profit), 0),
        )
        .filter(CartEntry.buy_offer_id.in_(session_ids))
        .group_by(CartEntry.buy_offer_id)
        .all()
    )

    aggregates = SessionAggregates()
    for session_id, eval_count in evaluation_rows:
        aggregates.evaluations[session_id] = int(eval_count or 0)

    for session_id, cart_count, total_value, expected_profit in cart_rows:
        aggregates.carts[session_id] = CartAggregate(
            cart_count=int(cart_count or 0),
            total_value=round(to_number(total_value), 2),
            expected_profit=round(to_number(expected_profit), 2),
        )

    return aggregates
