# Overview: Flask API routes for cards within buying desk sessions; evaluation, cart and revert moves.

"""Buying desk session asset routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..schemas import ADD_ASSET, MOVE_TO_CART, UPDATE_ASSET
from ..services import session_asset_service
from ..services.session_asset_service import (
    AssetNotFoundError,
    DuplicateAssetError,
    MoveOutcome,
    SessionAssetError,
    SessionNotFoundError,
)
from ..validation import ValidationError, validate_payload


assets_bp = Blueprint("buying_desk_assets", __name__, url_prefix="/api/buying-desk")


def _asset_error_response(e: SessionAssetError):
    if isinstance(e, (SessionNotFoundError, AssetNotFoundError)):
        return jsonify({"error": str(e)}), 404
    if isinstance(e, DuplicateAssetError):
        return jsonify({"error": str(e), "details": e.details}), 409
    return jsonify({"error": str(e), "details": e.details}), 400


@assets_bp.get("/sessions/<session_id>/assets")
@require_auth
def list_session_assets_route(session_id: str):
    """Evaluating, ready (cart) and purchased cards of a session."""
    try:
        assets = session_asset_service.list_session_assets(g.user_id, session_id)
        return jsonify(assets), 200

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch session assets")
        return jsonify({"error": "Failed to fetch session assets"}), 500


@assets_bp.post("/sessions/<session_id>/assets")
@require_auth
def add_session_asset_route(session_id: str):
    """
    Add a card to the session for evaluation.

    Body: assetId or certNumber
    """
    try:
        data = validate_payload(schema=ADD_ASSET, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        entry = session_asset_service.add_asset(
            g.user_id,
            session_id,
            asset_id=data.get("asset_id"),
            cert_number=data.get("cert_number"),
        )
        return jsonify(entry.to_dict()), 201

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add asset to session")
        return jsonify({"error": "Failed to add asset to session"}), 500


@assets_bp.patch("/sessions/<session_id>/assets/<entry_id>")
@require_auth
def update_session_asset_route(session_id: str, entry_id: str):
    """
    Update a cart entry (offerPrice, notes) or an evaluation entry (notes).
    """
    try:
        data = validate_payload(schema=UPDATE_ASSET, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        entry = session_asset_service.update_asset(g.user_id, session_id, entry_id, data)
        return jsonify(entry.to_dict()), 200

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update session asset")
        return jsonify({"error": "Failed to update session asset"}), 500


@assets_bp.delete("/sessions/<session_id>/assets/<entry_id>")
@require_auth
def remove_session_asset_route(session_id: str, entry_id: str):
    try:
        session_asset_service.remove_asset(g.user_id, session_id, entry_id)
        return "", 204

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove asset from session")
        return jsonify({"error": "Failed to remove asset from session"}), 500


@assets_bp.post("/sessions/<session_id>/cart/move")
@require_auth
def move_to_cart_route(session_id: str):
    """
    Move an evaluating card into the cart with an offer price.

    Body: evaluationId, offerPrice, notes?

    Returns:
    - 201: cart entry created
    - 200: existing cart entry updated, or nothing left to move
    """
    try:
        data = validate_payload(schema=MOVE_TO_CART, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        result = session_asset_service.move_to_cart(
            g.user_id,
            session_id,
            data["evaluation_id"],
            data["offer_price"],
            data.get("notes"),
        )

        if result.outcome is MoveOutcome.ALREADY_MOVED:
            return jsonify({
                "message": "Already moved to cart or evaluation not found",
                "outcome": result.outcome.value,
            }), 200

        body = result.entry.to_dict()
        body["outcome"] = result.outcome.value
        return jsonify(body), result.status_code

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to move asset to cart")
        return jsonify({"error": "Failed to move asset to cart"}), 500


@assets_bp.delete("/sessions/<session_id>/cart/<entry_id>")
@require_auth
def remove_from_cart_route(session_id: str, entry_id: str):
    """Move a card from the cart back to evaluation. Accepts cart or evaluation id."""
    try:
        session_asset_service.remove_from_cart(g.user_id, session_id, entry_id)
        return "", 204

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove cart item")
        return jsonify({"error": "Failed to remove cart item"}), 500


@assets_bp.delete("/sessions/<session_id>/revert/<asset_id>")
@require_auth
def revert_purchase_route(session_id: str, asset_id: str):
    """Undo a purchase of a card and put it back into this session's cart."""
    try:
        session_asset_service.revert_purchase(g.user_id, session_id, asset_id)
        return jsonify({"success": True}), 200

    except SessionAssetError as e:
        return _asset_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to revert purchase")
        return jsonify({"error": "Failed to revert purchase"}), 500
