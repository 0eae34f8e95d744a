# Overview: Service-layer operations for buying desk sellers and their contacts.

from __future__ import annotations

import logging

from ..extensions import db
from ..models import Contact, Seller


logger = logging.getLogger(__name__)


class SellerError(Exception):
    """Raised for seller operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ContactNotFoundError(SellerError):
    """The contact does not exist or belongs to another user."""


def _contact_payload(contact: Contact | None) -> dict:
    if contact is None:
        return {
            "id": None,
            "name": None,
            "email": None,
            "phoneNumber": None,
            "companyName": None,
            "notes": None,
        }
    return {
        "id": contact.id,
        "name": contact.name,
        "email": contact.email,
        "phoneNumber": contact.phone,
        "companyName": contact.company_name,
        "notes": contact.notes,
    }


def list_sellers(user_id: str) -> list[dict]:
    """Sellers owned by the user, each with its contact details."""
    rows = (
        db.session.query(Seller, Contact)
        .outerjoin(Contact, Seller.contact_id == Contact.id)
        .filter(Seller.user_id == user_id)
        .order_by(Seller.created_at.asc())
        .all()
    )
    return [
        {"seller": {"id": seller.id}, "contact": _contact_payload(contact)}
        for seller, contact in rows
    ]


def resolve_seller_for_contact(user_id: str, contact_id: str) -> str:
    """
    Seller id for (contact, user), creating the link when none exists.

    The contact must belong to the user (ContactNotFoundError). Flushes but
    does not commit; the caller owns the transaction.
    """
    owned = (
        db.session.query(Contact.id)
        .filter(Contact.id == contact_id, Contact.user_id == user_id)
        .first()
    )
    if owned is None:
        raise ContactNotFoundError("Contact not found", details={"contact_id": contact_id})

    existing = (
        db.session.query(Seller.id)
        .filter(Seller.contact_id == contact_id, Seller.user_id == user_id)
        .first()
    )
    if existing:
        return existing[0]

    seller = Seller(contact_id=contact_id, user_id=user_id, is_active=True)
    db.session.add(seller)
    db.session.flush()
    logger.info("Created seller %s for contact %s", seller.id, contact_id)
    return seller.id


def create_seller(user_id: str, data: dict) -> dict:
    """
    Create a seller from contact details.

    An existing contact of the same user with the same email is reused, and
    so is an existing seller for that contact.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise SellerError("name is required")

    email = data.get("email") or None
    phone = data.get("phone_number") or data.get("phone") or None

    contact = None
    if email:
        contact = (
            db.session.query(Contact)
            .filter(Contact.user_id == user_id, Contact.email == email)
            .first()
        )

    if contact is None:
        contact = Contact(
            user_id=user_id,
            name=name,
            email=email,
            phone=phone,
            company_name=data.get("company_name") or None,
            notes=data.get("notes") or None,
            source="buying_desk",
        )
        db.session.add(contact)
        db.session.flush()

    seller_id = resolve_seller_for_contact(user_id, contact.id)
    db.session.commit()

    return {
        "id": seller_id,
        "contactId": contact.id,
        "contact": _contact_payload(contact),
    }
