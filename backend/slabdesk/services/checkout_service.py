# Overview: Service-layer operations for buying desk checkout, undoing purchases and profit backfill.

"""
Buying Desk Checkout

Finalizing a session turns every cart entry into an owned UserAsset plus a
PurchaseTransaction, clears the cart and closes the session, all in one
transaction. Purchases are filed under the session's event, or the user's
"Buying Desk Transactions" event which is created on first use.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta

from ..extensions import db
from ..models import (
    BuySession,
    CartEntry,
    Contact,
    Event,
    GlobalAsset,
    PurchaseTransaction,
    Seller,
    UserAsset,
)
from ..models.common import to_decimal, to_number
from ..time_utils import to_utc_z, today, utcnow
from .concurrency import lock_for_update, run_with_retry, unit_of_work
from .pricing_service import market_value_for_asset
from .refresh_service import schedule_sales_refresh


logger = logging.getLogger(__name__)

DEFAULT_EVENT_NAME = "Buying Desk Transactions"
DEFAULT_EVENT_LOCATION = "Buying Desk"
DEFAULT_EVENT_DAYS = 365
UNKNOWN_SELLER = "Unknown Seller"
PURCHASE_SOURCE = "SlabDesk"
CHECKOUT_REFRESH_DELAY_SECONDS = 1.0


class CheckoutError(Exception):
    """Raised for checkout errors; status_code is the HTTP status to report."""
    def __init__(self, message: str, details: dict | None = None, status_code: int = 400):
        super().__init__(message)
        self.details = details or {}
        self.status_code = status_code


@dataclass
class Receipt:
    session_id: str
    session_number: str
    transaction_id: str
    total: float
    payment_method: str
    amount_paid: float
    event_id: str
    user_asset_ids: list[str] = field(default_factory=list)
    purchase_transaction_ids: list[str] = field(default_factory=list)
    processed_assets: list[str] = field(default_factory=list)
    receipt_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    paid_at: str | None = field(default_factory=lambda: to_utc_z(utcnow()))

    def to_dict(self) -> dict:
        return {
            "receiptId": self.receipt_id,
            "sessionId": self.session_id,
            "sessionNumber": self.session_number,
            "transactionId": self.transaction_id,
            "total": self.total,
            "paidAt": self.paid_at,
            "paymentMethod": self.payment_method,
            "amountPaid": self.amount_paid,
            "itemsProcessed": len(self.purchase_transaction_ids),
            "eventId": self.event_id,
            "userAssetsCreated": len(self.user_asset_ids),
            "purchaseTransactionsCreated": len(self.purchase_transaction_ids),
            "processedAssets": list(self.processed_assets),
        }


def _ensure_default_event(user_id: str) -> Event:
    event = (
        db.session.query(Event)
        .filter(Event.user_id == user_id, Event.name == DEFAULT_EVENT_NAME)
        .first()
    )
    if event is not None:
        return event

    start = today()
    event = Event(
        user_id=user_id,
        name=DEFAULT_EVENT_NAME,
        description="Auto-created event for buying desk transactions",
        status="live",
        location=DEFAULT_EVENT_LOCATION,
        date_start=start,
        date_end=start + timedelta(days=DEFAULT_EVENT_DAYS),
    )
    db.session.add(event)
    db.session.flush()
    logger.info("Created default buying desk event %s for user %s", event.id, user_id)
    return event


def _seller_identity(session: BuySession) -> tuple[str | None, str]:
    """(contact id, display name) of the session's seller."""
    if not session.seller_id:
        return None, UNKNOWN_SELLER

    row = (
        db.session.query(Seller.contact_id, Contact.name)
        .outerjoin(Contact, Seller.contact_id == Contact.id)
        .filter(Seller.id == session.seller_id)
        .first()
    )
    if row is None or not row[0]:
        return None, UNKNOWN_SELLER
    return row[0], row[1] or UNKNOWN_SELLER


def finalize_checkout(user_id: str, session_id: str, data: dict) -> Receipt:
    """
    Purchase everything in the session's cart.

    data: payment_method, amount_paid, buyer_name, notes (validated upstream).
    """
    transaction_id = str(uuid.uuid4())
    payment_method = data.get("payment_method") or "cash"
    amount_paid = float(data["amount_paid"])

    def _op():
        with unit_of_work():
            session = lock_for_update(
                db.session.query(BuySession).filter(
                    BuySession.id == session_id,
                    BuySession.user_id == user_id,
                )
            ).first()
            if session is None:
                raise CheckoutError("Session not found", status_code=404)

            if session.status == "closed":
                raise CheckoutError(
                    "Session already processed",
                    details={"status": session.status, "sessionNumber": session.offer_number},
                    status_code=409,
                )

            cart_items = (
                db.session.query(CartEntry)
                .filter(CartEntry.buy_offer_id == session_id)
                .order_by(CartEntry.added_at.asc())
                .all()
            )
            if not cart_items:
                raise CheckoutError(
                    "No items in cart to process",
                    details={"hint": "Cart may have been already processed or cleared"},
                )

            total = round(sum(to_number(item.offer_price) for item in cart_items), 2)
            if amount_paid < total:
                raise CheckoutError(
                    "Payment amount insufficient",
                    details={"required": total, "provided": amount_paid},
                )

            seller_contact_id, seller_name = _seller_identity(session)
            event_id = session.event_id or _ensure_default_event(user_id).id

            receipt = Receipt(
                session_id=session_id,
                session_number=session.offer_number,
                transaction_id=transaction_id,
                total=total,
                payment_method=payment_method,
                amount_paid=amount_paid,
                event_id=event_id,
            )

            now = utcnow()
            for item in cart_items:
                asset = db.session.get(GlobalAsset, item.asset_id)
                if asset is None:
                    raise CheckoutError(
                        "Global asset not found for cart item",
                        details={"cart_item_id": item.id, "asset_id": item.asset_id},
                        status_code=500,
                    )

                price = to_decimal(item.offer_price)
                market_price = to_decimal(market_value_for_asset(item.asset_id))

                user_asset = UserAsset(
                    user_id=user_id,
                    global_asset_id=item.asset_id,
                    purchase_price=price,
                    purchase_date=now.date(),
                    purchase_source=PURCHASE_SOURCE,
                    buy_offer_id=session_id,
                    personal_value=price,
                    market_price_at_purchase=market_price,
                    ownership_status="own",
                    status="Active",
                    notes=item.notes or f"Purchased via Buying Desk - Session {session.offer_number}",
                    is_active=True,
                )
                db.session.add(user_asset)
                db.session.flush()

                purchase = PurchaseTransaction(
                    user_id=user_id,
                    event_id=event_id,
                    buy_offer_id=session_id,
                    global_asset_id=item.asset_id,
                    user_asset_id=user_asset.id,
                    purchase_price=price,
                    payment_method=payment_method,
                    seller_name=seller_name,
                    seller_contact_id=seller_contact_id,
                    market_price_at_purchase=market_price,
                    notes=item.notes or f"Buying Desk Purchase - Session {session.offer_number}",
                    purchase_date=now,
                )
                db.session.add(purchase)
                db.session.flush()

                receipt.user_asset_ids.append(user_asset.id)
                receipt.purchase_transaction_ids.append(purchase.id)
                receipt.processed_assets.append(asset.display_name)

            asset_ids = [item.asset_id for item in cart_items]
            for item in cart_items:
                db.session.delete(item)

            session.status = "closed"
            session.sent_at = now
            session.updated_at = now

            return receipt, asset_ids

    receipt, asset_ids = run_with_retry(_op)

    logger.info(
        "Checkout %s finalized session %s: %d items, total %.2f",
        transaction_id, session_id, len(asset_ids), receipt.total,
    )

    for asset_id in asset_ids:
        schedule_sales_refresh(asset_id, delay_seconds=CHECKOUT_REFRESH_DELAY_SECONDS)

    return receipt


def undo_purchase(user_id: str, asset_id: str) -> dict:
    """Remove the user's active owned copy of a card and its purchase transactions."""
    with unit_of_work():
        user_asset = (
            db.session.query(UserAsset)
            .filter(
                UserAsset.user_id == user_id,
                UserAsset.global_asset_id == asset_id,
                UserAsset.is_active.is_(True),
                UserAsset.ownership_status == "own",
            )
            .first()
        )
        if user_asset is None:
            raise CheckoutError(
                "Purchased asset not found or not owned by user",
                details={"asset_id": asset_id},
                status_code=404,
            )

        purchase_price = to_number(user_asset.purchase_price)
        transactions_removed = (
            db.session.query(PurchaseTransaction)
            .filter(
                PurchaseTransaction.user_id == user_id,
                PurchaseTransaction.global_asset_id == asset_id,
                PurchaseTransaction.user_asset_id == user_asset.id,
            )
            .delete(synchronize_session=False)
        )
        db.session.delete(user_asset)

        asset = db.session.get(GlobalAsset, asset_id)
        asset_details = asset.to_dict() if asset else None

    logger.info("Undo purchase completed for asset %s by user %s", asset_id, user_id)
    return {
        "message": "Purchase successfully undone",
        "assetId": asset_id,
        "asset": asset_details,
        "purchasePrice": purchase_price,
        "userAssetsRemoved": 1,
        "transactionsRemoved": transactions_removed,
        "undoneAt": to_utc_z(utcnow()),
    }


def recalculate_profits(user_id: str) -> int:
    """
    Backfill market value and expected profit for the user's cart entries
    whose expected profit is missing or zero. Entries without pricing data
    are left alone. Returns the number updated.
    """
    items = (
        db.session.query(CartEntry)
        .join(BuySession, CartEntry.buy_offer_id == BuySession.id)
        .filter(BuySession.user_id == user_id)
        .filter((CartEntry.expected_profit.is_(None)) | (CartEntry.expected_profit == 0))
        .all()
    )

    updated = 0
    for item in items:
        market_value = market_value_for_asset(item.asset_id)
        if not market_value:
            continue
        item.market_value_at_offer = to_decimal(market_value)
        item.expected_profit = to_decimal(market_value - to_number(item.offer_price))
        updated += 1

    db.session.commit()
    return updated
