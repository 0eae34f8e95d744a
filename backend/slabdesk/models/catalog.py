from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .common import new_uuid, optional_number, to_number


class GlobalAsset(db.Model):
    """
    Shared catalog record for one physical card, independent of any owner.

    card_id groups identical cards across different certificates; pricing
    data (card_sales) is keyed by it.
    """
    __tablename__ = "global_assets"
    __table_args__ = (
        db.Index("ix_global_assets_cert_number", "cert_number"),
        db.Index("ix_global_assets_card_id", "card_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)

    # Core identification: "graded", "raw", "sealed"
    type = db.Column(db.String(32), nullable=False, default="graded")
    grader = db.Column(db.String(32), nullable=True)
    cert_number = db.Column(db.String(64), nullable=True)
    card_id = db.Column(db.String(128), nullable=True)

    # Card details
    title = db.Column(db.Text, nullable=True)
    player_name = db.Column(db.String(255), nullable=True)
    set_name = db.Column(db.String(255), nullable=True)
    year = db.Column(db.String(16), nullable=True)
    card_number = db.Column(db.String(64), nullable=True)
    variant = db.Column(db.String(255), nullable=True)
    grade = db.Column(db.String(32), nullable=True)
    category = db.Column(db.String(64), nullable=True)

    psa_image_front_url = db.Column(db.Text, nullable=True)
    psa_image_back_url = db.Column(db.Text, nullable=True)

    last_pricing_update = db.Column(db.DateTime(timezone=True), nullable=True)
    # Set while a background sales refresh is queued for this card
    sales_refresh_requested_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<GlobalAsset id={self.id} cert={self.cert_number!r} title={self.title!r}>"

    @property
    def pricing_key(self) -> str:
        return self.card_id or self.id

    @property
    def display_name(self) -> str:
        if self.title:
            return self.title
        parts = [self.player_name or "Unknown", self.set_name, self.year, self.grade]
        return " ".join(p for p in parts if p)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "playerName": self.player_name,
            "setName": self.set_name,
            "year": self.year,
            "cardNumber": self.card_number,
            "variant": self.variant,
            "grader": self.grader,
            "grade": self.grade,
            "certNumber": self.cert_number,
            "psaImageFrontUrl": self.psa_image_front_url,
            "psaImageBackUrl": self.psa_image_back_url,
        }


class CardSale(db.Model):
    """
    Saved sold listing for a card. Input to the internal pricing lookup.

    Verified sales weigh fully in averages; unverified ones count half.
    """
    __tablename__ = "card_sales"
    __table_args__ = (
        db.Index("ix_card_sales_card_sold", "card_id", "sold_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    card_id = db.Column(db.String(128), nullable=False)
    global_asset_id = db.Column(db.String(36), db.ForeignKey("global_assets.id", ondelete="SET NULL"), nullable=True)

    title = db.Column(db.Text, nullable=True)
    sold_price = db.Column(db.Numeric(10, 2), nullable=False)
    shipping = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    verified = db.Column(db.Boolean, nullable=False, default=False)
    source = db.Column(db.String(32), nullable=True)  # ebay, internal
    sold_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def total_price(self) -> float:
        return to_number(self.sold_price) + to_number(self.shipping)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cardId": self.card_id,
            "globalAssetId": self.global_asset_id,
            "title": self.title,
            "soldPrice": to_number(self.sold_price),
            "shipping": to_number(self.shipping),
            "verified": self.verified,
            "source": self.source,
            "soldAt": to_utc_z(self.sold_at),
        }


class UserAsset(db.Model):
    """
    A card owned by a user. Buying desk checkout creates these with
    purchase_source "SlabDesk" and a link back to the buying session.
    """
    __tablename__ = "user_assets"
    __table_args__ = (
        db.Index("ix_user_assets_user_global", "user_id", "global_asset_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    global_asset_id = db.Column(db.String(36), db.ForeignKey("global_assets.id"), nullable=False)

    personal_value = db.Column(db.Numeric(10, 2), nullable=True)
    purchase_price = db.Column(db.Numeric(10, 2), nullable=True)
    market_price_at_purchase = db.Column(db.Numeric(10, 2), nullable=True)
    purchase_date = db.Column(db.Date, nullable=True)
    purchase_source = db.Column(db.String(64), nullable=True)
    buy_offer_id = db.Column(db.String(36), nullable=True)  # buying session, when bought at the desk
    notes = db.Column(db.Text, nullable=True)

    # "own" | "consignment" | "sold"
    ownership_status = db.Column(db.String(16), nullable=False, default="own")
    # Draft, Active, On Hold, Sold, Returned
    status = db.Column(db.String(16), nullable=False, default="Draft")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    added_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    global_asset = db.relationship("GlobalAsset")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "globalAssetId": self.global_asset_id,
            "personalValue": optional_number(self.personal_value),
            "purchasePrice": optional_number(self.purchase_price),
            "marketPriceAtPurchase": optional_number(self.market_price_at_purchase),
            "purchaseDate": self.purchase_date.isoformat() if self.purchase_date else None,
            "purchaseSource": self.purchase_source,
            "buyOfferId": self.buy_offer_id,
            "notes": self.notes,
            "ownershipStatus": self.ownership_status,
            "status": self.status,
            "isActive": self.is_active,
            "addedAt": to_utc_z(self.added_at),
        }
