from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .common import new_uuid


class Contact(db.Model):
    """
    Master contact record. Seller/buyer/consignor roles reference it.

    One email per user: an existing contact is reused by email match.
    """
    __tablename__ = "contacts"
    __table_args__ = (
        db.Index("ix_contacts_user_email", "user_id", "email"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    company_name = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    # manual, storefront_customer, event_customer, buying_desk
    source = db.Column(db.String(32), nullable=False, default="manual")
    archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phoneNumber": self.phone,
            "companyName": self.company_name,
            "notes": self.notes,
            "source": self.source,
            "archived": self.archived,
            "createdAt": to_utc_z(self.created_at),
        }


class Seller(db.Model):
    """Seller role for a contact, scoping it to buying desk use."""
    __tablename__ = "sellers"
    __table_args__ = (
        db.Index("ix_sellers_user_contact", "user_id", "contact_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    contact_id = db.Column(db.String(36), db.ForeignKey("contacts.id"), nullable=False)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    contact = db.relationship("Contact", backref=db.backref("sellers", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "contactId": self.contact_id,
            "isActive": self.is_active,
            "contact": self.contact.to_dict() if self.contact else None,
        }
