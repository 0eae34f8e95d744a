# Overview: Flask API routes for buying desk sessions; parses input and returns JSON responses.

"""Buying desk session CRUD routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..schemas import CREATE_SESSION, UPDATE_SESSION
from ..services import buy_session_service
from ..services.buy_session_service import ReferenceNotFoundError, SessionNumberGenerationError
from ..validation import ValidationError, validate_payload


sessions_bp = Blueprint("buying_desk_sessions", __name__, url_prefix="/api/buying-desk/sessions")


@sessions_bp.get("")
@require_auth
def list_sessions_route():
    """
    List the user's sessions, newest first.

    Query: eventId (optional), archived=true for archived sessions
    (default lists active ones).
    """
    try:
        event_id = request.args.get("eventId") or None
        archived = request.args.get("archived") == "true"

        sessions = buy_session_service.list_sessions(g.user_id, event_id=event_id, archived=archived)
        return jsonify(sessions), 200

    except Exception:
        current_app.logger.exception("Failed to fetch buy sessions")
        return jsonify({"error": "Failed to fetch buy sessions"}), 500


@sessions_bp.get("/<session_id>")
@require_auth
def get_session_route(session_id: str):
    try:
        session = buy_session_service.get_session_by_id(g.user_id, session_id)
        if not session:
            return jsonify({"error": "Session not found"}), 404

        return jsonify(session), 200

    except Exception:
        current_app.logger.exception("Failed to fetch buy session")
        return jsonify({"error": "Failed to fetch buy session"}), 500


@sessions_bp.post("")
@require_auth
def create_session_route():
    """
    Create a session.

    Body: notes?, sellerId?, contactId?, eventId?
    """
    try:
        data = validate_payload(schema=CREATE_SESSION, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        session = buy_session_service.create_session(g.user_id, data)
        return jsonify(session), 201

    except ReferenceNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SessionNumberGenerationError:
        current_app.logger.exception("Failed to assign a session number")
        return jsonify({
            "error": "Failed to create buy session",
            "reason": "Unable to assign session number",
        }), 500
    except Exception:
        current_app.logger.exception("Failed to create buy session")
        return jsonify({"error": "Failed to create buy session"}), 500


@sessions_bp.patch("/<session_id>")
@require_auth
def update_session_route(session_id: str):
    """
    Partially update a session. Setting status "closed" also archives it.

    Body: at least one of notes, status, sellerId, eventId
    """
    try:
        data = validate_payload(schema=UPDATE_SESSION, payload=request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid input", "details": e.details}), 400

    try:
        session = buy_session_service.update_session(g.user_id, session_id, data)
        if not session:
            return jsonify({"error": "Session not found"}), 404

        return jsonify(session), 200

    except ReferenceNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update buy session")
        return jsonify({"error": "Failed to update buy session"}), 500


@sessions_bp.delete("/<session_id>")
@require_auth
def delete_session_route(session_id: str):
    try:
        buy_session_service.delete_session(g.user_id, session_id)
        return "", 204

    except Exception:
        current_app.logger.exception("Failed to delete buy session")
        return jsonify({"error": "Failed to delete buy session"}), 500
