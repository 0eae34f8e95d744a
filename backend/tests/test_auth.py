# Overview: Pytest coverage for Supabase access token verification and the auth decorator.

"""
Authentication Tests

SECURITY TESTS: only HS256 tokens signed with the project secret, carrying
"sub" and the configured audience, and not expired, are accepted.
"""

import time

import jwt
import pytest

from slabdesk.config import TestConfig
from slabdesk.services.auth_service import verify_access_token

from conftest import USER_A, make_token


class TestVerifyAccessToken:

    def test_valid_token(self, app):
        with app.app_context():
            context = verify_access_token(make_token(USER_A, email="desk@example.com"))

        assert context.user_id == USER_A
        assert context.email == "desk@example.com"
        assert context.role == "authenticated"
        assert context.claims["aud"] == "authenticated"

    def test_expired(self, app):
        with app.app_context():
            assert verify_access_token(make_token(USER_A, expires_in=-60)) is None

    def test_wrong_secret(self, app):
        token = jwt.encode(
            {"sub": USER_A, "aud": "authenticated", "exp": int(time.time()) + 60},
            "some-other-secret-that-is-long-enough",
            algorithm="HS256",
        )
        with app.app_context():
            assert verify_access_token(token) is None

    def test_wrong_audience(self, app):
        with app.app_context():
            assert verify_access_token(make_token(USER_A, aud="anon")) is None

    def test_missing_sub(self, app):
        token = jwt.encode(
            {"aud": "authenticated", "exp": int(time.time()) + 60},
            TestConfig.SUPABASE_JWT_SECRET,
            algorithm="HS256",
        )
        with app.app_context():
            assert verify_access_token(token) is None

    def test_garbage(self, app):
        with app.app_context():
            assert verify_access_token("not.a.token") is None
            assert verify_access_token("") is None

    def test_unconfigured_secret(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "SUPABASE_JWT_SECRET", "")
        with app.app_context():
            assert verify_access_token(make_token(USER_A)) is None


class TestRequireAuth:

    def test_missing_header(self, client, db_session):
        resp = client.get("/api/buying-desk/sessions")

        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Authentication required"}

    @pytest.mark.parametrize("header", [
        "Token abc",
        "Bearer not-a-jwt",
        f"Bearer {make_token(USER_A, expires_in=-60)}",
    ])
    def test_rejected(self, client, db_session, header):
        resp = client.get("/api/buying-desk/sessions", headers={"Authorization": header})

        assert resp.status_code == 401

    def test_accepted(self, client, db_session, headers_a):
        assert client.get("/api/buying-desk/sessions", headers=headers_a).status_code == 200


class TestCors:

    def test_allowed_origin(self, client, db_session):
        resp = client.get("/health", headers={"Origin": "http://localhost:5173"})

        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    def test_other_origin(self, client, db_session):
        resp = client.get("/health", headers={"Origin": "https://evil.example"})

        assert "Access-Control-Allow-Origin" not in resp.headers
