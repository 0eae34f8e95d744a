# Overview: Flask API routes for bulk archive, restore and delete of buying desk sessions.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..schemas import BULK_SESSION_IDS
from ..services import buy_session_service
from ..services.buy_session_service import BulkResult
from ..validation import ValidationError, validate_payload


bulk_bp = Blueprint("buying_desk_bulk", __name__, url_prefix="/api/buying-desk/bulk")


def _bulk_response(result: BulkResult, *, count_key: str, verb: str):
    if result.failed_count:
        message = f"{verb} {result.count} of {result.requested} session(s)"
    else:
        message = f"Successfully {verb.lower()} {result.count} session(s)"

    body = {
        "success": True,
        count_key: result.count,
        "failedCount": result.failed_count,
        "message": message,
    }
    if result.failed_count:
        body["errors"] = result.errors
    return jsonify(body), 200


def _session_ids():
    data = validate_payload(schema=BULK_SESSION_IDS, payload=request.get_json(silent=True))
    return data["session_ids"]


@bulk_bp.patch("/archive")
@require_auth
def bulk_archive_route():
    """Body: sessionIds (uuid list, at least one)"""
    try:
        session_ids = _session_ids()
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "details": e.details}), 400

    try:
        result = buy_session_service.bulk_set_archived(g.user_id, session_ids, True)
        return _bulk_response(result, count_key="archivedCount", verb="Archived")

    except Exception:
        current_app.logger.exception("Failed to archive sessions")
        return jsonify({"error": "Failed to archive sessions"}), 500


@bulk_bp.patch("/unarchive")
@require_auth
def bulk_unarchive_route():
    try:
        session_ids = _session_ids()
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "details": e.details}), 400

    try:
        result = buy_session_service.bulk_set_archived(g.user_id, session_ids, False)
        return _bulk_response(result, count_key="unarchivedCount", verb="Unarchived")

    except Exception:
        current_app.logger.exception("Failed to unarchive sessions")
        return jsonify({"error": "Failed to unarchive sessions"}), 500


@bulk_bp.delete("/delete")
@require_auth
def bulk_delete_route():
    """Only archived sessions are deleted; others are reported per id."""
    try:
        session_ids = _session_ids()
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "details": e.details}), 400

    try:
        result = buy_session_service.bulk_delete(g.user_id, session_ids)
        return _bulk_response(result, count_key="deletedCount", verb="Deleted")

    except Exception:
        current_app.logger.exception("Failed to delete sessions")
        return jsonify({"error": "Failed to delete sessions"}), 500
