# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import auth_service


def require_auth(f):
    """
    Require a valid Supabase bearer token.

    Sets the following Flask g attributes:
    - g.user_id: The authenticated user's id ("sub" claim)
    - g.auth: The full AuthContext

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid or expired token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()

        context = auth_service.verify_access_token(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.user_id = context.user_id
        g.auth = context

        return f(*args, **kwargs)

    return decorated_function
