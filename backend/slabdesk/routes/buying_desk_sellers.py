# Overview: Flask API routes for buying desk sellers; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..schemas import CREATE_SELLER
from ..services import seller_service
from ..services.seller_service import SellerError
from ..validation import ValidationError, validate_payload


sellers_bp = Blueprint("buying_desk_sellers", __name__, url_prefix="/api/buying-desk/sellers")


@sellers_bp.get("")
@require_auth
def list_sellers_route():
    try:
        return jsonify(seller_service.list_sellers(g.user_id)), 200

    except Exception:
        current_app.logger.exception("Failed to list sellers")
        return jsonify({"error": "Failed to list sellers"}), 500


@sellers_bp.post("")
@require_auth
def create_seller_route():
    """
    Create a seller, reusing the contact with the same email if there is one.

    Body: name, email?, phoneNumber? (or phone), companyName?, notes?
    """
    try:
        data = validate_payload(schema=CREATE_SELLER, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        seller = seller_service.create_seller(g.user_id, data)
        return jsonify(seller), 201

    except SellerError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create seller")
        return jsonify({"error": "Failed to create seller"}), 500
