# Overview: Pytest coverage for buying desk session numbering.

import pytest

from slabdesk.models import BuySession
from slabdesk.services import session_numbers
from slabdesk.services.session_numbers import (
    format_session_number,
    generate_session_number,
    max_session_suffix,
)
from slabdesk.time_utils import utcnow

from conftest import USER_A, USER_B


def _insert(db_session, number, user_id=USER_A):
    db_session.add(BuySession(offer_number=number, user_id=user_id, status="active"))
    db_session.commit()


class TestFormat:

    @pytest.mark.parametrize("year, seq, expected", [
        (2026, 1, "BD-2026-0001"),
        (2026, 42, "BD-2026-0042"),
        (2025, 9999, "BD-2025-9999"),
        (2026, 12345, "BD-2026-12345"),
    ])
    def test_zero_pads_to_four_digits(self, year, seq, expected):
        assert format_session_number(year, seq) == expected


class TestGenerate:

    def test_first_number_starts_at_one(self, db_session):
        assert max_session_suffix() == 0
        assert generate_session_number() == f"BD-{utcnow().year}-0001"

    def test_suffix_is_global_across_years(self, db_session):
        """Sequence does not reset when the year changes."""
        _insert(db_session, "BD-2024-0007")
        _insert(db_session, "BD-2025-0003")

        assert generate_session_number() == f"BD-{utcnow().year}-0008"

    def test_suffix_is_global_across_users(self, db_session):
        _insert(db_session, "BD-2026-0010", user_id=USER_B)

        assert max_session_suffix() == 10

    def test_non_numeric_suffix_is_ignored(self, db_session):
        _insert(db_session, "BD-2026-0004")
        _insert(db_session, "LEGACY-OFFER")

        assert max_session_suffix() == 4

    def test_suffix_wider_than_padding(self, db_session):
        _insert(db_session, "BD-2026-10000")

        assert generate_session_number().endswith("-10001")

    def test_scan_used_outside_postgres(self, db_session, monkeypatch):
        def _fail():
            raise AssertionError("SQL path should not run on SQLite")

        monkeypatch.setattr(session_numbers, "_max_suffix_sql", _fail)
        _insert(db_session, "BD-2026-0002")

        assert max_session_suffix() == 2
