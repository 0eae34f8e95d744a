# Overview: Service-layer operations for cards within a buying session: evaluation, cart and purchase moves.

"""
Session Asset Service

A card moves through one buying session as:

    evaluating (EvaluationAsset) -> ready (CartEntry) -> purchased (PurchaseTransaction)

with ready -> evaluating (remove from cart) and purchased -> ready (revert).

Each transition is one unit of work. Repeated submissions are reported as
explicit outcomes instead of errors:
- move to cart when the evaluation row is gone: ALREADY_MOVED
- move to cart when the card is already in the cart: UPDATED (price changed)
- remove from cart when nothing is left to remove: no-op
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from ..extensions import db
from ..models import (
    BuySession,
    CartEntry,
    EvaluationAsset,
    GlobalAsset,
    PurchaseTransaction,
    UserAsset,
)
from ..models.common import to_decimal, to_number
from ..time_utils import utcnow
from .concurrency import unit_of_work
from .pricing_service import market_value_for_asset
from .refresh_service import schedule_sales_refresh


logger = logging.getLogger(__name__)

ADD_ASSET_REFRESH_DELAY_SECONDS = 0.5
REVERTED_NOTE = "Reverted from purchase"


class SessionAssetError(Exception):
    """Raised for session asset operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class SessionNotFoundError(SessionAssetError):
    def __init__(self, session_id: str):
        super().__init__("Session not found", details={"session_id": session_id})


class AssetNotFoundError(SessionAssetError):
    """Card, session entry or owned asset does not exist (404)."""


class DuplicateAssetError(SessionAssetError):
    """Card is already in the session's evaluation list or cart (409)."""


class MoveOutcome(enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    ALREADY_MOVED = "already_moved"


@dataclass
class MoveResult:
    outcome: MoveOutcome
    entry: CartEntry | None = None

    @property
    def status_code(self) -> int:
        return 201 if self.outcome is MoveOutcome.CREATED else 200


def require_session(user_id: str, session_id: str) -> BuySession:
    session = (
        db.session.query(BuySession)
        .filter(BuySession.id == session_id, BuySession.user_id == user_id)
        .first()
    )
    if session is None:
        raise SessionNotFoundError(session_id)
    return session


def _evaluation_for_asset(session_id: str, asset_id: str) -> EvaluationAsset | None:
    return (
        db.session.query(EvaluationAsset)
        .filter(EvaluationAsset.buy_offer_id == session_id, EvaluationAsset.asset_id == asset_id)
        .first()
    )


def _cart_for_asset(session_id: str, asset_id: str) -> CartEntry | None:
    return (
        db.session.query(CartEntry)
        .filter(CartEntry.buy_offer_id == session_id, CartEntry.asset_id == asset_id)
        .first()
    )


def list_session_assets(user_id: str, session_id: str) -> list[dict]:
    """Every card in the session: evaluating, then ready, then purchased."""
    require_session(user_id, session_id)

    evaluations = (
        db.session.query(EvaluationAsset)
        .filter(EvaluationAsset.buy_offer_id == session_id)
        .order_by(EvaluationAsset.added_at.asc())
        .all()
    )
    cart = (
        db.session.query(CartEntry)
        .filter(CartEntry.buy_offer_id == session_id)
        .order_by(CartEntry.added_at.asc())
        .all()
    )
    purchased = (
        db.session.query(PurchaseTransaction)
        .filter(PurchaseTransaction.buy_offer_id == session_id)
        .order_by(PurchaseTransaction.purchase_date.asc())
        .all()
    )

    return (
        [e.to_dict() for e in evaluations]
        + [c.to_dict() for c in cart]
        + [p.to_dict() for p in purchased]
    )


def add_asset(
    user_id: str,
    session_id: str,
    *,
    asset_id: str | None = None,
    cert_number: str | None = None,
) -> EvaluationAsset:
    """
    Stage a card for evaluation, by catalog id or certificate number.

    Rejects a card already evaluating or in the cart for this session, then
    schedules a background sales refresh so pricing shows up shortly.
    """
    with unit_of_work():
        require_session(user_id, session_id)

        if not asset_id and cert_number:
            found = (
                db.session.query(GlobalAsset.id)
                .filter(GlobalAsset.cert_number == cert_number)
                .first()
            )
            if found is None:
                raise AssetNotFoundError(
                    "Asset not found with provided cert number",
                    details={"cert_number": cert_number},
                )
            asset_id = found[0]

        if not asset_id:
            raise SessionAssetError("Asset ID is required")

        if db.session.get(GlobalAsset, asset_id) is None:
            raise AssetNotFoundError("Asset not found", details={"asset_id": asset_id})

        if _evaluation_for_asset(session_id, asset_id) or _cart_for_asset(session_id, asset_id):
            raise DuplicateAssetError(
                "Asset is already added to this session",
                details={"asset_id": asset_id},
            )

        entry = EvaluationAsset(
            buy_offer_id=session_id,
            asset_id=asset_id,
            evaluation_notes=None,
            added_at=utcnow(),
        )
        db.session.add(entry)

    schedule_sales_refresh(asset_id, delay_seconds=ADD_ASSET_REFRESH_DELAY_SECONDS)
    return entry


def update_asset(user_id: str, session_id: str, entry_id: str, data: dict) -> CartEntry | EvaluationAsset:
    """
    Edit a session entry by id.

    Cart entries take offer_price and notes (a new price recomputes expected
    profit from the stored market value). Evaluation entries take notes only.
    """
    with unit_of_work():
        require_session(user_id, session_id)

        has_price = data.get("offer_price") is not None
        has_notes = "notes" in data

        cart_entry = (
            db.session.query(CartEntry)
            .filter(CartEntry.buy_offer_id == session_id, CartEntry.id == entry_id)
            .first()
        )
        if cart_entry is not None and (has_price or has_notes):
            if has_price:
                cart_entry.offer_price = to_decimal(data["offer_price"])
                cart_entry.expected_profit = to_decimal(
                    to_number(cart_entry.market_value_at_offer) - data["offer_price"]
                )
            if has_notes:
                cart_entry.notes = data["notes"]
            return cart_entry

        evaluation = (
            db.session.query(EvaluationAsset)
            .filter(EvaluationAsset.buy_offer_id == session_id, EvaluationAsset.id == entry_id)
            .first()
        )
        if evaluation is not None and has_notes:
            evaluation.evaluation_notes = data["notes"]
            return evaluation

        raise AssetNotFoundError("Asset not found in session", details={"entry_id": entry_id})


def remove_asset(user_id: str, session_id: str, entry_id: str) -> None:
    """Delete a cart entry or evaluation entry by id."""
    with unit_of_work():
        require_session(user_id, session_id)

        deleted = (
            db.session.query(CartEntry)
            .filter(CartEntry.buy_offer_id == session_id, CartEntry.id == entry_id)
            .delete(synchronize_session=False)
        )
        if deleted:
            return

        deleted = (
            db.session.query(EvaluationAsset)
            .filter(EvaluationAsset.buy_offer_id == session_id, EvaluationAsset.id == entry_id)
            .delete(synchronize_session=False)
        )
        if deleted:
            return

        raise AssetNotFoundError("Asset not found in session", details={"entry_id": entry_id})


def move_to_cart(
    user_id: str,
    session_id: str,
    evaluation_id: str,
    offer_price: float,
    notes: str | None = None,
) -> MoveResult:
    """
    evaluating -> ready.

    The market value is snapshotted when the cart entry is created and
    expected profit = market value - offer price. Re-moving a card that is
    already in the cart only updates its price and notes.
    """
    with unit_of_work():
        require_session(user_id, session_id)

        evaluation = (
            db.session.query(EvaluationAsset)
            .filter(EvaluationAsset.id == evaluation_id, EvaluationAsset.buy_offer_id == session_id)
            .first()
        )
        if evaluation is None:
            return MoveResult(MoveOutcome.ALREADY_MOVED)

        asset_id = evaluation.asset_id

        existing = _cart_for_asset(session_id, asset_id)
        if existing is not None:
            market_value = to_number(existing.market_value_at_offer)
            existing.offer_price = to_decimal(offer_price)
            existing.notes = notes
            existing.expected_profit = to_decimal(market_value - offer_price)
            # A stale evaluation row for a carted card is the same card twice
            db.session.delete(evaluation)
            return MoveResult(MoveOutcome.UPDATED, existing)

        market_value = market_value_for_asset(asset_id)
        entry = CartEntry(
            buy_offer_id=session_id,
            asset_id=asset_id,
            offer_price=to_decimal(offer_price),
            notes=notes,
            market_value_at_offer=to_decimal(market_value),
            expected_profit=to_decimal(market_value - offer_price),
            added_at=utcnow(),
        )
        db.session.add(entry)
        db.session.delete(evaluation)

    return MoveResult(MoveOutcome.CREATED, entry)


def remove_from_cart(user_id: str, session_id: str, entry_id: str) -> bool:
    """
    ready -> evaluating.

    entry_id may be the cart entry id or, when the client raced ahead, the
    card's evaluation id. The card gets at most one evaluation row back.
    Returns False when there was nothing to remove.
    """
    with unit_of_work():
        require_session(user_id, session_id)

        cart_entry = (
            db.session.query(CartEntry)
            .filter(CartEntry.id == entry_id, CartEntry.buy_offer_id == session_id)
            .first()
        )
        if cart_entry is None:
            evaluation = (
                db.session.query(EvaluationAsset)
                .filter(EvaluationAsset.id == entry_id, EvaluationAsset.buy_offer_id == session_id)
                .first()
            )
            if evaluation is not None:
                cart_entry = _cart_for_asset(session_id, evaluation.asset_id)

        if cart_entry is None:
            return False

        asset_id = cart_entry.asset_id
        db.session.delete(cart_entry)

        if _evaluation_for_asset(session_id, asset_id) is None:
            db.session.add(EvaluationAsset(
                buy_offer_id=session_id,
                asset_id=asset_id,
                evaluation_notes=None,
                added_at=utcnow(),
            ))

    return True


def revert_purchase(user_id: str, session_id: str, asset_id: str) -> CartEntry:
    """
    purchased -> ready.

    Deletes the user's purchase transaction and owned asset for the card,
    puts it back in this session's cart at price 0, and reopens the session
    (status in_progress, sent_at cleared) so it can be checked out again.
    """
    with unit_of_work():
        session = require_session(user_id, session_id)

        owned = (
            db.session.query(UserAsset)
            .filter(UserAsset.global_asset_id == asset_id, UserAsset.user_id == user_id)
            .all()
        )
        if not owned:
            raise AssetNotFoundError("User asset not found", details={"asset_id": asset_id})

        db.session.query(PurchaseTransaction).filter(
            PurchaseTransaction.global_asset_id == asset_id,
            PurchaseTransaction.user_id == user_id,
        ).delete(synchronize_session=False)

        for user_asset in owned:
            db.session.delete(user_asset)

        entry = _cart_for_asset(session_id, asset_id)
        if entry is None:
            entry = CartEntry(buy_offer_id=session_id, asset_id=asset_id, added_at=utcnow())
            db.session.add(entry)
        entry.offer_price = to_decimal(0)
        entry.notes = REVERTED_NOTE
        entry.market_value_at_offer = None
        entry.expected_profit = None

        session.status = "in_progress"
        session.sent_at = None
        session.updated_at = utcnow()

    logger.info("Reverted purchase of %s in session %s", asset_id, session_id)
    return entry
