# Overview: Flask API routes for buying desk checkout, purchase undo and profit recalculation.

"""Buying desk checkout routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..schemas import FINALIZE_CHECKOUT
from ..services import checkout_service
from ..services.checkout_service import CheckoutError
from ..validation import ValidationError, validate_payload


checkout_bp = Blueprint("buying_desk_checkout", __name__, url_prefix="/api/buying-desk")


@checkout_bp.post("/sessions/<session_id>/checkout/finalize")
@require_auth
def finalize_checkout_route(session_id: str):
    """
    Purchase every cart item of the session and close it.

    Body: paymentMethod (cash|check|digital|trade, default cash),
    amountPaid, buyerName, notes?

    Returns:
    - 201: receipt
    - 400: empty cart or insufficient payment
    - 404: session not found
    - 409: session already closed
    """
    try:
        data = validate_payload(schema=FINALIZE_CHECKOUT, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        receipt = checkout_service.finalize_checkout(g.user_id, session_id, data)
        return jsonify(receipt.to_dict()), 201

    except CheckoutError as e:
        if e.status_code >= 500:
            current_app.logger.error("Checkout failed for session %s: %s", session_id, e)
            return jsonify({"error": "Failed to finalize checkout", "message": str(e)}), e.status_code
        body = {"error": str(e)}
        body.update(e.details)
        return jsonify(body), e.status_code
    except Exception:
        current_app.logger.exception("Failed to finalize checkout")
        return jsonify({"error": "Failed to finalize checkout"}), 500


@checkout_bp.patch("/recalculate-profits")
@require_auth
def recalculate_profits_route():
    """Fill in expected profit for cart items still missing it."""
    try:
        updated = checkout_service.recalculate_profits(g.user_id)
        if not updated:
            return jsonify({"message": "No cart items need profit recalculation", "updated": 0}), 200

        return jsonify({
            "message": f"Recalculated expected profit for {updated} cart items",
            "updated": updated,
        }), 200

    except Exception:
        current_app.logger.exception("Failed to recalculate profits")
        return jsonify({"error": "Failed to recalculate profits"}), 500


@checkout_bp.delete("/purchased/<asset_id>")
@require_auth
def undo_purchase_route(asset_id: str):
    """Remove a purchased card from the user's collection."""
    try:
        result = checkout_service.undo_purchase(g.user_id, asset_id)
        return jsonify(result), 200

    except CheckoutError as e:
        return jsonify({"error": str(e)}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to undo purchase")
        return jsonify({"error": "Failed to undo purchase"}), 500
