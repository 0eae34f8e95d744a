import pytest

from slabdesk.schemas import (
    ADD_ASSET,
    BULK_SESSION_IDS,
    CREATE_SESSION,
    FINALIZE_CHECKOUT,
    MOVE_TO_CART,
    UPDATE_SESSION,
)
from slabdesk.validation import MAX_PRICE, ValidationError, to_snake, validate_payload


def _errors(schema, payload):
    with pytest.raises(ValidationError) as exc:
        validate_payload(schema=schema, payload=payload)
    return exc.value.details


def test_to_snake():
    assert to_snake("offerPrice") == "offer_price"
    assert to_snake("sessionIds") == "session_ids"
    assert to_snake("notes") == "notes"


def test_unknown_keys_dropped_and_absent_fields_omitted():
    data = validate_payload(schema=CREATE_SESSION, payload={"notes": "hi", "bogus": 1})

    assert data == {"notes": "hi"}


def test_nullable_field_keeps_explicit_null():
    data = validate_payload(schema=CREATE_SESSION, payload={"eventId": None})

    assert data == {"event_id": None}


def test_non_object_body():
    assert _errors(CREATE_SESSION, ["notes"]) == {"formErrors": ["Expected object"], "fieldErrors": {}}


def test_null_body_is_empty_object():
    assert validate_payload(schema=CREATE_SESSION, payload=None) == {}


def test_price_is_strict_number():
    details = _errors(MOVE_TO_CART, {"evaluationId": "e1", "offerPrice": "50"})

    assert details["fieldErrors"]["offerPrice"] == ["Expected number, received string"]


def test_boolean_is_not_a_number():
    details = _errors(MOVE_TO_CART, {"evaluationId": "e1", "offerPrice": True})

    assert details["fieldErrors"]["offerPrice"] == ["Expected number, received boolean"]


def test_price_bounds():
    assert "offerPrice" in _errors(MOVE_TO_CART, {"evaluationId": "e1", "offerPrice": -0.01})["fieldErrors"]
    assert "offerPrice" in _errors(MOVE_TO_CART, {"evaluationId": "e1", "offerPrice": MAX_PRICE + 1})["fieldErrors"]

    data = validate_payload(schema=MOVE_TO_CART, payload={"evaluationId": "e1", "offerPrice": 0})
    assert data["offer_price"] == 0


def test_required_fields():
    details = _errors(MOVE_TO_CART, {})

    assert details["fieldErrors"] == {"evaluationId": ["Required"], "offerPrice": ["Required"]}


def test_enum():
    details = _errors(UPDATE_SESSION, {"status": "sent"})

    assert details["fieldErrors"]["status"] == [
        "Invalid enum value. Expected 'active' | 'in_progress' | 'closed', received 'sent'"
    ]


def test_require_any():
    assert _errors(UPDATE_SESSION, {"unknown": 1})["formErrors"] == ["At least one field must be provided"]


def test_require_one_of_ignores_blank():
    assert _errors(ADD_ASSET, {"assetId": ""})["formErrors"] == ["Either assetId or certNumber must be provided"]


def test_default_applied():
    data = validate_payload(schema=FINALIZE_CHECKOUT, payload={"amountPaid": 10, "buyerName": "Desk"})

    assert data["payment_method"] == "cash"


def test_uuid_list():
    assert "sessionIds" in _errors(BULK_SESSION_IDS, {"sessionIds": []})["fieldErrors"]
    assert _errors(BULK_SESSION_IDS, {"sessionIds": ["x"]})["fieldErrors"]["sessionIds"] == ["Invalid uuid"]

    ids = ["33333333-3333-4333-8333-333333333333"]
    assert validate_payload(schema=BULK_SESSION_IDS, payload={"sessionIds": ids}) == {"session_ids": ids}


def test_string_length():
    details = _errors(CREATE_SESSION, {"notes": "x" * 5001})

    assert details["fieldErrors"]["notes"] == ["String must contain at most 5000 character(s)"]
