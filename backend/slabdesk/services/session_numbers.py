# Overview: Session-number generation for buying desk sessions ("BD-<year>-<seq>").

from __future__ import annotations

import re

from sqlalchemy import Integer, cast, func

from ..extensions import db
from ..models import BuySession
from ..time_utils import utcnow


SESSION_NUMBER_PREFIX = "BD"
SESSION_NUMBER_PAD = 4

TRAILING_DIGITS = r"(\d+)$"
_TRAILING_DIGITS_RE = re.compile(TRAILING_DIGITS)


def _max_suffix_sql() -> int:
    stmt = db.select(
        func.max(cast(func.substring(BuySession.offer_number, TRAILING_DIGITS), Integer))
    )
    return db.session.execute(stmt).scalar() or 0


def _max_suffix_scan() -> int:
    highest = 0
    for (number,) in db.session.execute(db.select(BuySession.offer_number)):
        match = _TRAILING_DIGITS_RE.search(number or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def max_session_suffix() -> int:
    """Highest trailing numeric suffix across every existing session number (0 when none)."""
    if db.engine.dialect.name == "postgresql":
        return _max_suffix_sql()
    return _max_suffix_scan()


def format_session_number(year: int, sequence: int) -> str:
    return f"{SESSION_NUMBER_PREFIX}-{year}-{sequence:0{SESSION_NUMBER_PAD}d}"


def generate_session_number() -> str:
    """
    Next session number: current year plus one more than the highest suffix.

    The suffix sequence is global, not reset per year. Nothing is reserved;
    the unique constraint on buy_offers.offer_number decides, and the caller
    regenerates on collision.
    """
    return format_session_number(utcnow().year, max_session_suffix() + 1)
