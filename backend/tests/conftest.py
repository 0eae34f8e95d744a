"""
Pytest fixtures for SlabDesk backend tests.

Provides test database setup, two owners for isolation checks, Supabase-style
bearer tokens and catalog/seller fixtures.
"""

import time
import uuid
from datetime import timedelta

import jwt
import pytest

from slabdesk import create_app
from slabdesk.config import TestConfig
from slabdesk.extensions import db
from slabdesk.models import CardSale, Contact, Event, GlobalAsset, Seller
from slabdesk.services import buy_session_service
from slabdesk.time_utils import today, utcnow


USER_A = "11111111-1111-4111-8111-111111111111"
USER_B = "22222222-2222-4222-8222-222222222222"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def make_token(user_id: str, expires_in: int = 3600, **claims) -> str:
    """Sign an access token the way Supabase does (HS256, aud=authenticated)."""
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(time.time()) + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, TestConfig.SUPABASE_JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: str = USER_A) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {make_token(user_id)}'}


@pytest.fixture(scope='function')
def make_asset(db_session):
    """Factory for catalog cards."""
    def _make(**overrides):
        values = {
            "type": "graded",
            "grader": "PSA",
            "cert_number": str(uuid.uuid4().int)[:8],
            "card_id": f"card-{uuid.uuid4().hex[:8]}",
            "player_name": "Ken Griffey Jr.",
            "set_name": "Upper Deck",
            "year": "1989",
            "card_number": "1",
            "grade": "PSA 10",
        }
        values.update(overrides)
        asset = GlobalAsset(**values)
        db_session.add(asset)
        db_session.commit()
        return asset
    return _make


@pytest.fixture(scope='function')
def asset(make_asset):
    return make_asset(cert_number="12345678", title="1989 Upper Deck Ken Griffey Jr. #1 PSA 10")


@pytest.fixture(scope='function')
def add_sales(db_session):
    """Factory for saved sales: add_sales(card_id, [(price, days_ago, verified), ...])."""
    def _add(card_id, sales):
        now = utcnow()
        for price, age_days, verified in sales:
            db_session.add(CardSale(
                card_id=card_id,
                sold_price=price,
                shipping=0,
                verified=verified,
                source="ebay",
                sold_at=now - timedelta(days=age_days),
            ))
        db_session.commit()
    return _add


@pytest.fixture(scope='function')
def contact_a(db_session):
    contact = Contact(
        user_id=USER_A,
        name="Sam Seller",
        email="sam@example.com",
        phone="555-0100",
        source="manual",
    )
    db_session.add(contact)
    db_session.commit()
    return contact


@pytest.fixture(scope='function')
def seller_a(db_session, contact_a):
    seller = Seller(contact_id=contact_a.id, user_id=USER_A, is_active=True)
    db_session.add(seller)
    db_session.commit()
    return seller


@pytest.fixture(scope='function')
def event_a(db_session):
    event = Event(
        user_id=USER_A,
        name="Spring Card Show",
        location="Convention Center",
        date_start=today(),
        status="upcoming",
    )
    db_session.add(event)
    db_session.commit()
    return event


@pytest.fixture(scope='function')
def make_session(db_session):
    """Factory creating a session through the service; returns its summary dict."""
    def _make(user_id=USER_A, **data):
        return buy_session_service.create_session(user_id, data)
    return _make


@pytest.fixture(scope='function')
def headers_a():
    return auth_headers(USER_A)


@pytest.fixture(scope='function')
def headers_b():
    return auth_headers(USER_B)
