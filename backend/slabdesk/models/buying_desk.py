from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .common import new_uuid, optional_number, to_number


# active: open, work in progress
# in_progress: reopened after a purchase was reverted
# closed: checked out or cancelled (closing also archives)
BUY_SESSION_STATUSES = ("active", "in_progress", "closed")

PAYMENT_METHODS = ("cash", "check", "digital", "trade")


class BuySession(db.Model):
    """
    Buying desk working session (stored as a "buy offer").

    offer_number is the human identifier "BD-<year>-<seq>". Generation is
    advisory; the unique constraint is the source of truth and creation
    retries on collision.
    """
    __tablename__ = "buy_offers"
    __table_args__ = (
        db.UniqueConstraint("offer_number", name="uq_buy_offers_offer_number"),
        db.Index("ix_buy_offers_user_created", "user_id", "created_at"),
        db.Index("ix_buy_offers_user_archived", "user_id", "archived"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    offer_number = db.Column(db.String(32), nullable=False)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    seller_id = db.Column(db.String(36), db.ForeignKey("sellers.id"), nullable=True)
    event_id = db.Column(db.String(36), db.ForeignKey("events.id", ondelete="SET NULL"), nullable=True, index=True)

    status = db.Column(db.String(16), nullable=False, default="active")
    notes = db.Column(db.Text, nullable=True)
    # Visibility state, separate from status
    archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    sent_at = db.Column(db.DateTime(timezone=True), nullable=True)

    seller = db.relationship("Seller")
    event = db.relationship("Event")
    evaluation_assets = db.relationship(
        "EvaluationAsset",
        backref="session",
        lazy=True,
        cascade="all, delete-orphan",
    )
    cart_entries = db.relationship(
        "CartEntry",
        backref="session",
        lazy=True,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<BuySession id={self.id} number={self.offer_number!r} status={self.status}>"


class EvaluationAsset(db.Model):
    """A card staged in a session for price consideration (status "evaluating")."""
    __tablename__ = "buy_offer_evaluation_assets"
    __table_args__ = (
        db.Index("ix_eval_assets_session_asset", "buy_offer_id", "asset_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    buy_offer_id = db.Column(db.String(36), db.ForeignKey("buy_offers.id", ondelete="CASCADE"), nullable=False)
    asset_id = db.Column(db.String(36), db.ForeignKey("global_assets.id", ondelete="CASCADE"), nullable=False)
    evaluation_notes = db.Column(db.Text, nullable=True)
    added_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    asset = db.relationship("GlobalAsset")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sessionId": self.buy_offer_id,
            "assetId": self.asset_id,
            "status": "evaluating",
            "offerPrice": None,
            "notes": self.evaluation_notes,
            "addedAt": to_utc_z(self.added_at),
            "asset": self.asset.to_dict() if self.asset else {"id": self.asset_id},
        }


class CartEntry(db.Model):
    """
    A card with an offer price, ready to purchase (status "ready").

    market_value_at_offer is snapshotted when the card enters the cart;
    expected_profit = market value - offer price.
    """
    __tablename__ = "buy_offer_assets"
    __table_args__ = (
        db.Index("ix_cart_entries_session_asset", "buy_offer_id", "asset_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    buy_offer_id = db.Column(db.String(36), db.ForeignKey("buy_offers.id", ondelete="CASCADE"), nullable=False)
    asset_id = db.Column(db.String(36), db.ForeignKey("global_assets.id", ondelete="CASCADE"), nullable=False)
    offer_price = db.Column(db.Numeric(10, 2), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    market_value_at_offer = db.Column(db.Numeric(10, 2), nullable=True)
    expected_profit = db.Column(db.Numeric(10, 2), nullable=True)
    added_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    asset = db.relationship("GlobalAsset")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sessionId": self.buy_offer_id,
            "assetId": self.asset_id,
            "status": "ready",
            "offerPrice": optional_number(self.offer_price),
            "marketValueAtOffer": optional_number(self.market_value_at_offer),
            "expectedProfit": optional_number(self.expected_profit),
            "notes": self.notes,
            "addedAt": to_utc_z(self.added_at),
            "asset": self.asset.to_dict() if self.asset else {"id": self.asset_id},
        }


class PurchaseTransaction(db.Model):
    """
    Finalized record of a completed buy from a seller.

    At most one active purchase per (user, global asset); reverting deletes
    it together with the owned UserAsset.
    """
    __tablename__ = "purchase_transactions"
    __table_args__ = (
        db.Index("ix_purchase_txns_user_asset", "user_id", "global_asset_id"),
        db.Index("ix_purchase_txns_session", "buy_offer_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    event_id = db.Column(db.String(36), db.ForeignKey("events.id", ondelete="SET NULL"), nullable=True)
    buy_offer_id = db.Column(db.String(36), db.ForeignKey("buy_offers.id", ondelete="SET NULL"), nullable=True)
    global_asset_id = db.Column(db.String(36), db.ForeignKey("global_assets.id", ondelete="CASCADE"), nullable=False)
    user_asset_id = db.Column(db.String(36), db.ForeignKey("user_assets.id", ondelete="CASCADE"), nullable=True)

    purchase_price = db.Column(db.Numeric(10, 2), nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)  # PAYMENT_METHODS

    seller_name = db.Column(db.String(255), nullable=True)
    seller_contact_id = db.Column(db.String(36), db.ForeignKey("contacts.id"), nullable=True)

    market_price_at_purchase = db.Column(db.Numeric(10, 2), nullable=True)

    notes = db.Column(db.Text, nullable=True)
    purchase_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    asset = db.relationship("GlobalAsset")

    @property
    def realized_profit(self) -> float:
        return to_number(self.market_price_at_purchase) - to_number(self.purchase_price)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sessionId": self.buy_offer_id,
            "assetId": self.global_asset_id,
            "status": "purchased",
            "offerPrice": to_number(self.purchase_price),
            "purchasePrice": to_number(self.purchase_price),
            "marketPriceAtPurchase": optional_number(self.market_price_at_purchase),
            "realizedProfit": self.realized_profit,
            "paymentMethod": self.payment_method,
            "purchaseDate": to_utc_z(self.purchase_date),
            "userAssetId": self.user_asset_id,
            "notes": self.notes,
            "addedAt": to_utc_z(self.purchase_date),
            "seller": (
                {"id": self.seller_contact_id, "name": self.seller_name}
                if self.seller_contact_id or self.seller_name
                else None
            ),
            "asset": self.asset.to_dict() if self.asset else {"id": self.global_asset_id},
        }
