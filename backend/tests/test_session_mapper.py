from datetime import datetime

from slabdesk.services.session_mapper import map_session, normalize_id, normalize_text
from slabdesk.services.session_queries import CartAggregate, SessionAggregates, SessionRow, fetch_aggregates


def _row(**overrides):
    values = dict(
        id="s1",
        offer_number="BD-2026-0001",
        event_id=None,
        notes=None,
        status="active",
        archived=0,
        created_at=datetime(2026, 3, 1, 12, 0, 0),
        updated_at=datetime(2026, 3, 1, 12, 30, 0),
    )
    values.update(overrides)
    return SessionRow(**values)


def test_defaults_without_aggregates():
    summary = map_session(_row(), SessionAggregates())

    assert summary["sessionNumber"] == "BD-2026-0001"
    assert summary["archived"] is False
    assert summary["createdAt"] == "2026-03-01T12:00:00Z"
    assert "event" not in summary
    assert "seller" not in summary
    assert summary["evaluationCount"] == 0
    assert summary["cartCount"] == 0
    assert summary["assetCount"] == 0
    assert summary["totalValue"] == 0
    assert summary["expectedProfit"] == 0


def test_counts_add_up():
    aggregates = SessionAggregates(
        evaluations={"s1": 3},
        carts={"s1": CartAggregate(cart_count=2, total_value=120.5, expected_profit=40)},
    )

    summary = map_session(_row(), aggregates)

    assert summary["assetCount"] == 5
    assert summary["totalValue"] == 120.5
    assert summary["expectedProfit"] == 40


def test_fallback_names():
    summary = map_session(_row(event_id="e1", seller_id="sel1"), SessionAggregates())

    assert summary["event"] == {"id": "e1", "name": "Unknown Event", "location": None}
    assert summary["seller"]["name"] == "—"


def test_normalizers():
    assert normalize_text("  x ") == "x"
    assert normalize_text("   ") is None
    assert normalize_text(None) is None
    assert normalize_id(" abc ") == "abc"
    assert normalize_id("") is None


def test_fetch_aggregates_empty_list_skips_query():
    # No app context needed: an empty id list never touches the database
    aggregates = fetch_aggregates([])

    assert aggregates.evaluations == {}
    assert aggregates.carts == {}
