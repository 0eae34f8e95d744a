# Overview: Service-layer operations for auth; verifies Supabase-issued access tokens.

"""
Authentication Service

Sign-in happens in Supabase; this service only verifies the bearer JWT that
Supabase issues. Tokens are HS256-signed with the project JWT secret and
carry the user id in "sub" and the role audience in "aud".

SECURITY NOTES:
- Expired tokens, bad signatures, wrong audience and tokens without "sub"
  all verify as None (caller answers 401)
- Without a configured secret no token verifies
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import jwt
from flask import current_app


logger = logging.getLogger(__name__)

JWT_ALGORITHMS = ["HS256"]


@dataclass
class AuthContext:
    """Identity established for one request."""
    user_id: str
    email: str | None
    role: str | None
    claims: dict


def verify_access_token(token: str) -> AuthContext | None:
    """Decode and verify an access token. Returns None when it is not acceptable."""
    if not token:
        return None

    secret = current_app.config.get("SUPABASE_JWT_SECRET")
    if not secret:
        logger.error("SUPABASE_JWT_SECRET is not configured; rejecting token")
        return None

    audience = current_app.config.get("SUPABASE_JWT_AUDIENCE") or None

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=JWT_ALGORITHMS,
            audience=audience,
            options={"require": ["exp", "sub"], "verify_aud": audience is not None},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected invalid access token: %s", exc)
        return None

    user_id = claims.get("sub")
    if not user_id:
        return None

    return AuthContext(
        user_id=str(user_id),
        email=claims.get("email"),
        role=claims.get("role"),
        claims=claims,
    )
