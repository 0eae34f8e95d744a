# Overview: Request body schemas for the buying desk API.

from __future__ import annotations

from .models import BUY_SESSION_STATUSES, PAYMENT_METHODS
from .validation import MAX_PRICE, FieldSpec, RequestSchema


NOTES_MAX = 5000

_notes = FieldSpec("string", nullable=True, max_length=NOTES_MAX)
_ref = FieldSpec("string", nullable=True, max_length=64)
_price = FieldSpec("number", min_value=0, max_value=MAX_PRICE)


CREATE_SESSION = RequestSchema(fields={
    "notes": _notes,
    "sellerId": _ref,
    "contactId": _ref,
    "eventId": _ref,
})

UPDATE_SESSION = RequestSchema(
    fields={
        "notes": _notes,
        "status": FieldSpec("enum", choices=BUY_SESSION_STATUSES),
        "sellerId": _ref,
        "eventId": _ref,
    },
    require_any=True,
)

ADD_ASSET = RequestSchema(
    fields={
        "assetId": FieldSpec("string", max_length=64),
        "certNumber": FieldSpec("string", max_length=64),
    },
    require_one_of=("assetId", "certNumber"),
    require_one_of_message="Either assetId or certNumber must be provided",
)

UPDATE_ASSET = RequestSchema(fields={
    "offerPrice": _price,
    "notes": FieldSpec("string", max_length=NOTES_MAX),
})

MOVE_TO_CART = RequestSchema(fields={
    "evaluationId": FieldSpec("string", required=True, min_length=1),
    "offerPrice": FieldSpec("number", required=True, min_value=0, max_value=MAX_PRICE),
    "notes": _notes,
})

FINALIZE_CHECKOUT = RequestSchema(fields={
    "paymentMethod": FieldSpec("enum", choices=PAYMENT_METHODS, default="cash"),
    "amountPaid": FieldSpec("number", required=True, min_value=0),
    "buyerName": FieldSpec("string", required=True, min_length=1, max_length=255),
    "notes": FieldSpec("string", max_length=NOTES_MAX),
})

CREATE_SELLER = RequestSchema(fields={
    "name": FieldSpec("string", required=True, min_length=1, max_length=255),
    "email": FieldSpec("email", nullable=True, max_length=255),
    "phoneNumber": FieldSpec("string", nullable=True, max_length=64),
    "phone": FieldSpec("string", nullable=True, max_length=64),
    "companyName": FieldSpec("string", nullable=True, max_length=255),
    "notes": _notes,
})

BULK_SESSION_IDS = RequestSchema(fields={
    "sessionIds": FieldSpec("uuid_list", required=True, min_length=1),
})
