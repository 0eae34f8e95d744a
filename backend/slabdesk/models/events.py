from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .common import new_uuid


EVENT_STATUSES = ("upcoming", "live", "completed", "cancelled")


class Event(db.Model):
    """A card show or other selling/buying event owned by a user."""
    __tablename__ = "events"
    __table_args__ = (
        db.Index("ix_events_user_name", "user_id", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(36), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    date_start = db.Column(db.Date, nullable=False)
    date_end = db.Column(db.Date, nullable=True)  # null for single day events
    location = db.Column(db.Text, nullable=True)
    description = db.Column(db.Text, nullable=True)

    # User-controlled lifecycle (EVENT_STATUSES); archived is visibility only
    status = db.Column(db.String(32), nullable=False, default="upcoming")
    archived = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "dateStart": self.date_start.isoformat() if self.date_start else None,
            "dateEnd": self.date_end.isoformat() if self.date_end else None,
            "location": self.location,
            "description": self.description,
            "status": self.status,
            "archived": self.archived,
            "createdAt": to_utc_z(self.created_at),
        }
