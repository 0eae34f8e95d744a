# Overview: Service-layer operations for buying desk sessions; CRUD, numbering retries and bulk actions.

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import BuySession, Event, Seller
from ..time_utils import utcnow
from .concurrency import is_unique_violation
from .seller_service import ContactNotFoundError, resolve_seller_for_contact
from .session_mapper import map_session, normalize_id, normalize_text
from .session_numbers import generate_session_number
from .session_queries import fetch_aggregates, fetch_session_rows


logger = logging.getLogger(__name__)

SESSION_NUMBER_ATTEMPTS = 5


class BuySessionError(Exception):
    """Raised for buying session operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ReferenceNotFoundError(BuySessionError):
    """A seller, contact or event id that the user does not own."""


class SessionNumberGenerationError(BuySessionError):
    """Every attempt to assign a unique session number collided."""
    def __init__(self, attempts: int = SESSION_NUMBER_ATTEMPTS):
        super().__init__(
            "Unable to generate unique session number",
            details={"attempts": attempts},
        )


@dataclass
class BulkResult:
    requested: int
    count: int = 0
    errors: list[dict] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.errors)


def list_sessions(user_id: str, event_id: str | None = None, archived: bool | None = None) -> list[dict]:
    rows = fetch_session_rows(user_id, event_id=event_id, archived=archived)
    if not rows:
        return []

    aggregates = fetch_aggregates([row.id for row in rows])
    return [map_session(row, aggregates) for row in rows]


def get_session_by_id(user_id: str, session_id: str) -> dict | None:
    """Session summary, or None when missing or owned by someone else."""
    rows = fetch_session_rows(user_id, session_id=session_id)
    if not rows:
        return None

    aggregates = fetch_aggregates([rows[0].id])
    return map_session(rows[0], aggregates)


def get_owned_session(user_id: str, session_id: str) -> BuySession | None:
    return (
        db.session.query(BuySession)
        .filter(BuySession.id == session_id, BuySession.user_id == user_id)
        .first()
    )


def _require_owned_seller(user_id: str, seller_id: str | None) -> None:
    if seller_id is None:
        return
    owned = (
        db.session.query(Seller.id)
        .filter(Seller.id == seller_id, Seller.user_id == user_id)
        .first()
    )
    if owned is None:
        raise ReferenceNotFoundError("Seller not found", details={"seller_id": seller_id})


def _require_owned_event(user_id: str, event_id: str | None) -> None:
    if event_id is None:
        return
    owned = (
        db.session.query(Event.id)
        .filter(Event.id == event_id, Event.user_id == user_id)
        .first()
    )
    if owned is None:
        raise ReferenceNotFoundError("Event not found", details={"event_id": event_id})


def create_session(user_id: str, data: dict) -> dict:
    """
    Create a session with the next free session number.

    A contact_id without a seller_id is resolved to that contact's seller,
    creating the seller link in the same commit as the session. Seller,
    contact and event ids must belong to the user (ReferenceNotFoundError).
    Number collisions are retried up to SESSION_NUMBER_ATTEMPTS times.
    """
    seller_id = normalize_id(data.get("seller_id"))
    contact_id = normalize_id(data.get("contact_id"))
    event_id = normalize_id(data.get("event_id"))
    notes = normalize_text(data.get("notes"))

    _require_owned_seller(user_id, seller_id)
    _require_owned_event(user_id, event_id)
    resolve_contact = bool(contact_id) and seller_id is None

    for attempt in range(1, SESSION_NUMBER_ATTEMPTS + 1):
        if resolve_contact:
            # Re-resolved each attempt: a rollback also discards a new seller link
            try:
                seller_id = resolve_seller_for_contact(user_id, contact_id)
            except ContactNotFoundError:
                db.session.rollback()
                raise ReferenceNotFoundError("Contact not found", details={"contact_id": contact_id})

        now = utcnow()
        session = BuySession(
            user_id=user_id,
            offer_number=generate_session_number(),
            seller_id=seller_id,
            event_id=event_id,
            notes=notes,
            status="active",
            created_at=now,
            updated_at=now,
        )
        db.session.add(session)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if is_unique_violation(exc):
                logger.warning(
                    "Session number %s collided (attempt %d/%d)",
                    session.offer_number, attempt, SESSION_NUMBER_ATTEMPTS,
                )
                continue
            raise

        logger.info("Created buy session %s (%s)", session.id, session.offer_number)
        summary = get_session_by_id(user_id, session.id)
        if summary is None:
            raise BuySessionError("Unable to load created session", details={"session_id": session.id})
        return summary

    raise SessionNumberGenerationError()


def update_session(user_id: str, session_id: str, data: dict) -> dict | None:
    """
    Partial update of notes, status, seller_id and event_id.

    Closing a session archives it in the same write. When nothing is
    supplied the row is left untouched. Returns None when not owned;
    raises ReferenceNotFoundError for a seller or event of another user.
    """
    session = get_owned_session(user_id, session_id)
    if session is None:
        return None

    if "seller_id" in data:
        _require_owned_seller(user_id, normalize_id(data["seller_id"]))
    if "event_id" in data:
        _require_owned_event(user_id, normalize_id(data["event_id"]))

    changed = False

    if "notes" in data:
        session.notes = normalize_text(data["notes"])
        changed = True

    if "status" in data and data["status"] is not None:
        session.status = data["status"]
        if data["status"] == "closed":
            session.archived = True
        changed = True

    if "seller_id" in data:
        session.seller_id = normalize_id(data["seller_id"])
        changed = True

    if "event_id" in data:
        session.event_id = normalize_id(data["event_id"])
        changed = True

    if changed:
        session.updated_at = utcnow()
        db.session.commit()

    summary = get_session_by_id(user_id, session_id)
    if summary is None:
        raise BuySessionError("Session disappeared after update", details={"session_id": session_id})
    return summary


def delete_session(user_id: str, session_id: str) -> None:
    """Owner-scoped hard delete; missing or foreign sessions are ignored."""
    session = get_owned_session(user_id, session_id)
    if session is None:
        return

    db.session.delete(session)
    db.session.commit()
    logger.info("Deleted buy session %s", session_id)


def _check_bulk_target(user_id: str, session_id: str) -> tuple[BuySession | None, str | None]:
    session = db.session.get(BuySession, session_id)
    if session is None:
        return None, "Session not found"
    if session.user_id != user_id:
        return None, "Access denied"
    return session, None


def bulk_set_archived(user_id: str, session_ids: list[str], archived: bool) -> BulkResult:
    """Archive or restore many sessions, reporting a per-id error for each skipped one."""
    result = BulkResult(requested=len(session_ids))
    now = utcnow()

    for session_id in session_ids:
        session, error = _check_bulk_target(user_id, session_id)
        if error:
            result.errors.append({"id": session_id, "error": error})
            continue

        session.archived = archived
        session.updated_at = now
        result.count += 1

    db.session.commit()
    return result


def bulk_delete(user_id: str, session_ids: list[str]) -> BulkResult:
    """Delete many sessions. Only archived sessions can be deleted."""
    result = BulkResult(requested=len(session_ids))

    for session_id in session_ids:
        session, error = _check_bulk_target(user_id, session_id)
        if error:
            result.errors.append({"id": session_id, "error": error})
            continue
        if not session.archived:
            result.errors.append({"id": session_id, "error": "Session must be archived before deleting"})
            continue

        db.session.delete(session)
        result.count += 1

    db.session.commit()
    return result
