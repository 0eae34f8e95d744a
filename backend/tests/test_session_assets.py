# Overview: Pytest coverage for cards moving through a buying session.

"""
Session Asset Tests

evaluating -> ready -> purchased (and back) including the repeated-request
outcomes: re-moving a card, removing a card that is already back in
evaluation, and reverting a purchase into a session that still has it.
"""

import pytest
from sqlalchemy import text

from slabdesk.extensions import db
from slabdesk.models import CardSale, CartEntry, EvaluationAsset, PurchaseTransaction, UserAsset
from slabdesk.services import buy_session_service, checkout_service, session_asset_service
from slabdesk.services.session_asset_service import (
    AssetNotFoundError,
    DuplicateAssetError,
    MoveOutcome,
    SessionNotFoundError,
)
from slabdesk.time_utils import utcnow

from conftest import USER_A, USER_B


@pytest.fixture
def market_value(monkeypatch):
    """Pin the market value snapshot to a known price."""
    def _pin(value):
        monkeypatch.setattr(session_asset_service, "market_value_for_asset", lambda asset_id: value)
        monkeypatch.setattr(checkout_service, "market_value_for_asset", lambda asset_id: value)
    return _pin


class TestAddAsset:

    def test_add_by_id(self, db_session, make_session, asset):
        session = make_session()

        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        assert entry.to_dict()["status"] == "evaluating"
        assert entry.to_dict()["asset"]["certNumber"] == "12345678"
        assert db_session.query(EvaluationAsset).count() == 1

    def test_add_by_cert_number(self, make_session, asset):
        session = make_session()

        entry = session_asset_service.add_asset(USER_A, session["id"], cert_number="12345678")

        assert entry.asset_id == asset.id

    def test_unknown_cert_number(self, make_session):
        session = make_session()

        with pytest.raises(AssetNotFoundError):
            session_asset_service.add_asset(USER_A, session["id"], cert_number="00000000")

    def test_unknown_asset_id(self, make_session):
        session = make_session()

        with pytest.raises(AssetNotFoundError):
            session_asset_service.add_asset(USER_A, session["id"], asset_id="no-such-card")

    def test_duplicate_in_evaluation(self, make_session, asset):
        session = make_session()
        session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        with pytest.raises(DuplicateAssetError):
            session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

    def test_duplicate_in_cart(self, make_session, asset, market_value):
        market_value(0)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 10)

        with pytest.raises(DuplicateAssetError):
            session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

    def test_same_card_in_two_sessions(self, make_session, asset):
        first = make_session()
        second = make_session()

        session_asset_service.add_asset(USER_A, first["id"], asset_id=asset.id)
        session_asset_service.add_asset(USER_A, second["id"], asset_id=asset.id)

    def test_foreign_session(self, make_session, asset):
        session = make_session(USER_B)

        with pytest.raises(SessionNotFoundError):
            session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)


class TestMoveToCart:

    def test_snapshot_and_aggregates(self, db_session, make_session, asset, market_value):
        market_value(80)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        result = session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 50)

        assert result.outcome is MoveOutcome.CREATED
        assert result.status_code == 201
        cart = result.entry.to_dict()
        assert cart["status"] == "ready"
        assert cart["offerPrice"] == 50
        assert cart["marketValueAtOffer"] == 80
        assert cart["expectedProfit"] == 30
        assert db_session.query(EvaluationAsset).count() == 0

        summary = buy_session_service.get_session_by_id(USER_A, session["id"])
        assert summary["cartCount"] == 1
        assert summary["evaluationCount"] == 0
        assert summary["totalValue"] == 50
        assert summary["expectedProfit"] == 30

    def test_repeat_is_already_moved(self, db_session, make_session, asset, market_value):
        market_value(80)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        evaluation_id = entry.id
        session_asset_service.move_to_cart(USER_A, session["id"], evaluation_id, 50)

        again = session_asset_service.move_to_cart(USER_A, session["id"], evaluation_id, 50)

        assert again.outcome is MoveOutcome.ALREADY_MOVED
        assert again.status_code == 200
        assert db_session.query(CartEntry).count() == 1

    def test_stale_evaluation_updates_cart_entry(self, db_session, make_session, asset, market_value):
        market_value(80)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 50)

        stale = EvaluationAsset(buy_offer_id=session["id"], asset_id=asset.id)
        db_session.add(stale)
        db_session.commit()

        result = session_asset_service.move_to_cart(USER_A, session["id"], stale.id, 60, "counter offer")

        assert result.outcome is MoveOutcome.UPDATED
        assert result.status_code == 200
        assert result.entry.to_dict()["offerPrice"] == 60
        assert result.entry.to_dict()["expectedProfit"] == 20
        assert result.entry.notes == "counter offer"
        assert db_session.query(CartEntry).count() == 1
        assert db_session.query(EvaluationAsset).count() == 0

    def test_pricing_failure_snapshots_zero(self, make_session, asset, monkeypatch):
        def _broken(card_key):
            raise RuntimeError("pricing backend down")

        monkeypatch.setattr("slabdesk.services.pricing_service.get_saved_sales", _broken)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        result = session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 40)

        assert result.entry.to_dict()["marketValueAtOffer"] == 0
        assert result.entry.to_dict()["expectedProfit"] == -40

    def test_failed_pricing_query_is_rolled_back_alone(self, db_session, make_session, asset, monkeypatch):
        def _write_then_fail(card_key):
            db.session.add(CardSale(card_id=card_key, sold_price=999, shipping=0, sold_at=utcnow()))
            db.session.flush()
            db.session.execute(text("SELECT no_such_column FROM card_sales"))

        monkeypatch.setattr("slabdesk.services.pricing_service.get_saved_sales", _write_then_fail)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        result = session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 40)

        assert result.outcome is MoveOutcome.CREATED
        assert result.entry.to_dict()["marketValueAtOffer"] == 0
        assert db_session.query(CartEntry).count() == 1
        assert db_session.query(EvaluationAsset).count() == 0
        assert db_session.query(CardSale).count() == 0


class TestRemoveFromCart:

    def _carted(self, make_session, asset):
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        result = session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 50)
        return session, result.entry.id

    def test_back_to_evaluation(self, db_session, make_session, asset, market_value):
        market_value(80)
        session, cart_entry_id = self._carted(make_session, asset)

        assert session_asset_service.remove_from_cart(USER_A, session["id"], cart_entry_id) is True

        assert db_session.query(CartEntry).count() == 0
        evaluations = db_session.query(EvaluationAsset).all()
        assert [e.asset_id for e in evaluations] == [asset.id]

    def test_repeat_is_a_no_op(self, db_session, make_session, asset, market_value):
        market_value(80)
        session, cart_entry_id = self._carted(make_session, asset)
        session_asset_service.remove_from_cart(USER_A, session["id"], cart_entry_id)

        assert session_asset_service.remove_from_cart(USER_A, session["id"], cart_entry_id) is False
        assert db_session.query(EvaluationAsset).count() == 1

    def test_accepts_evaluation_id_of_carted_card(self, db_session, make_session, asset, market_value):
        market_value(80)
        session, _ = self._carted(make_session, asset)
        stale = EvaluationAsset(buy_offer_id=session["id"], asset_id=asset.id)
        db_session.add(stale)
        db_session.commit()

        assert session_asset_service.remove_from_cart(USER_A, session["id"], stale.id) is True

        assert db_session.query(CartEntry).count() == 0
        assert db_session.query(EvaluationAsset).count() == 1


class TestUpdateAndRemove:

    def test_price_change_recomputes_profit(self, make_session, asset, market_value):
        market_value(80)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        cart = session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 50).entry

        updated = session_asset_service.update_asset(USER_A, session["id"], cart.id, {"offer_price": 70})

        assert updated.to_dict()["offerPrice"] == 70
        assert updated.to_dict()["expectedProfit"] == 10

    def test_evaluation_notes(self, make_session, asset):
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        updated = session_asset_service.update_asset(USER_A, session["id"], entry.id, {"notes": "corner ding"})

        assert updated.to_dict()["notes"] == "corner ding"

    def test_price_on_evaluation_entry_is_not_found(self, make_session, asset):
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)

        with pytest.raises(AssetNotFoundError):
            session_asset_service.update_asset(USER_A, session["id"], entry.id, {"offer_price": 10})

    def test_remove_entry(self, db_session, make_session, asset):
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        entry_id = entry.id

        session_asset_service.remove_asset(USER_A, session["id"], entry_id)

        assert db_session.query(EvaluationAsset).count() == 0
        with pytest.raises(AssetNotFoundError):
            session_asset_service.remove_asset(USER_A, session["id"], entry_id)


class TestListAndRevert:

    def test_list_orders_by_status(self, make_session, make_asset, market_value):
        market_value(0)
        session = make_session()
        first, second = make_asset(), make_asset()
        e1 = session_asset_service.add_asset(USER_A, session["id"], asset_id=first.id)
        session_asset_service.add_asset(USER_A, session["id"], asset_id=second.id)
        session_asset_service.move_to_cart(USER_A, session["id"], e1.id, 5)

        listed = session_asset_service.list_session_assets(USER_A, session["id"])

        assert [(a["assetId"], a["status"]) for a in listed] == [
            (second.id, "evaluating"),
            (first.id, "ready"),
        ]

    def test_revert_purchase(self, db_session, make_session, asset, market_value):
        market_value(80)
        session = make_session()
        entry = session_asset_service.add_asset(USER_A, session["id"], asset_id=asset.id)
        session_asset_service.move_to_cart(USER_A, session["id"], entry.id, 50)
        checkout_service.finalize_checkout(
            USER_A, session["id"], {"payment_method": "cash", "amount_paid": 50, "buyer_name": "Desk"},
        )

        cart_entry = session_asset_service.revert_purchase(USER_A, session["id"], asset.id)

        assert cart_entry.to_dict()["offerPrice"] == 0
        assert cart_entry.notes == "Reverted from purchase"
        assert db_session.query(UserAsset).count() == 0
        assert db_session.query(PurchaseTransaction).count() == 0

        summary = buy_session_service.get_session_by_id(USER_A, session["id"])
        assert summary["status"] == "in_progress"
        assert summary["cartCount"] == 1

    def test_revert_reuses_existing_cart_entry(self, db_session, make_session, asset, market_value):
        market_value(80)
        session = make_session()
        db_session.add(UserAsset(user_id=USER_A, global_asset_id=asset.id, purchase_price=50))
        db_session.add(CartEntry(buy_offer_id=session["id"], asset_id=asset.id, offer_price=50))
        db_session.commit()

        session_asset_service.revert_purchase(USER_A, session["id"], asset.id)

        assert db_session.query(CartEntry).count() == 1

    def test_revert_without_owned_asset(self, make_session, asset):
        session = make_session()

        with pytest.raises(AssetNotFoundError):
            session_asset_service.revert_purchase(USER_A, session["id"], asset.id)
