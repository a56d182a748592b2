"""
Integration tests for the cookie-based session endpoints.

Covers ``/api/auth/register``, ``/login``, ``/logout``, ``/me`` and the
``/api/user/me`` probe, driving the full request pipeline (gate, guards,
services, error boundary) through the Flask test client.

Key Concepts Demonstrated:
- Cookie lifecycle testing (set on login, cleared on logout)
- Decoding issued tokens to assert their claims
- Negative paths: bad credentials, duplicates, stale tokens
"""

from __future__ import annotations

import json

import jwt
import pytest

from tests.helpers import auth_headers, create_test_token

pytestmark = pytest.mark.integration

ALICE = {"fullName": "Alice Example", "username": "alice1234", "password": "secret123"}


def _post(client, path, payload, headers=None):
    return client.post(
        path,
        data=json.dumps(payload),
        content_type="application/json",
        headers=headers or {},
    )


class TestRegister:

    def test_register_creates_user_and_sets_cookie(self, client, db_session):
        """Test that self-registration returns the view and logs the person in."""
        # Act
        response = _post(client, "/api/auth/register", ALICE)

        # Assert
        assert response.status_code == 200
        data = response.get_json()
        assert data["username"] == "alice1234"
        assert data["role"] == "USER"
        assert "password" not in data and "passwordHash" not in data
        assert client.get_cookie("token") is not None

    def test_register_ignores_requested_role(self, client, db_session):
        """Test that a client cannot self-register as ADMIN."""
        response = _post(client, "/api/auth/register", {**ALICE, "role": "ADMIN"})

        assert response.status_code == 200
        assert response.get_json()["role"] == "USER"

    def test_register_duplicate_username(self, client, db_session):
        # Arrange
        _post(client, "/api/auth/register", ALICE)

        # Act
        response = _post(client, "/api/auth/register", ALICE)

        # Assert
        assert response.status_code == 409
        assert response.get_json()["error"] == "DUPLICATE_ENTRY"

    def test_register_validation_errors(self, client, db_session):
        """Test that every invalid field is reported at once."""
        # Act
        response = _post(
            client, "/api/auth/register", {"fullName": "short", "username": "abc", "password": "1234"}
        )

        # Assert
        assert response.status_code == 400
        data = response.get_json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["fieldErrors"] == {
            "fullName": "Full name must be a minimum of 8 - 100 characters only.",
            "username": "Username must be a minimum of 8 - 50 characters only.",
            "password": "Password must be a minimum of 8 characters.",
        }

    def test_register_non_json_body(self, client, db_session):
        response = client.post("/api/auth/register", data="not json", content_type="text/plain")

        assert response.status_code == 400
        assert response.get_json()["error"] == "INVALID"


class TestLogin:

    def test_login_issues_token_with_identity_claims(self, client, db_session, jwt_secret):
        """Test the alice1234 / secret123 scenario end to end."""
        # Arrange
        created = _post(client, "/api/auth/register", ALICE).get_json()
        client.delete_cookie("token")

        # Act
        response = _post(client, "/api/auth/login", {"username": "alice1234", "password": "secret123"})

        # Assert
        assert response.status_code == 200
        assert response.get_json() == created
        token = client.get_cookie("token").value
        claims = jwt.decode(token, jwt_secret, algorithms=["HS256"])
        assert claims["sub"] == str(created["personId"])
        assert claims["username"] == "alice1234"
        assert claims["fullName"] == "Alice Example"
        assert claims["role"] == "USER"
        assert claims["exp"] - claims["iat"] == 3600

    def test_login_cookie_attributes(self, client, db_session):
        # Arrange
        _post(client, "/api/auth/register", ALICE)

        # Act
        response = _post(client, "/api/auth/login", {"username": "alice1234", "password": "secret123"})

        # Assert
        cookie = response.headers["Set-Cookie"]
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie
        assert "Path=/" in cookie
        assert "Max-Age=3600" in cookie

    @pytest.mark.parametrize(
        "credentials",
        [
            {"username": "alice1234", "password": "wrongpass"},
            {"username": "nobody_here", "password": "secret123"},
        ],
        ids=["wrong-password", "unknown-user"],
    )
    def test_bad_credentials_are_indistinguishable(self, client, db_session, credentials):
        # Arrange
        _post(client, "/api/auth/register", ALICE)
        client.delete_cookie("token")

        # Act
        response = _post(client, "/api/auth/login", credentials)

        # Assert
        assert response.status_code == 401
        data = response.get_json()
        assert data["error"] == "UNAUTHORIZED"
        assert data["message"] == "You have entered a wrong username or password. Please try again."
        assert client.get_cookie("token") is None

    def test_login_missing_fields(self, client, db_session):
        response = _post(client, "/api/auth/login", {"username": "alice1234"})

        assert response.status_code == 400
        assert response.get_json()["fieldErrors"] == {"password": "Password must not be null."}


class TestMeAndLogout:

    def test_me_with_cookie(self, client, db_session):
        # Arrange
        created = _post(client, "/api/auth/register", ALICE).get_json()

        # Act
        response = client.get("/api/auth/me")

        # Assert
        assert response.status_code == 200
        assert response.get_json() == created

    def test_me_without_token(self, client, db_session):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.get_json()["error"] == "UNAUTHORIZED"

    def test_me_after_person_deleted(self, client, db_session, admin_headers):
        """Test that a still-valid token for a deleted person is treated as logged out."""
        # Arrange
        created = _post(client, "/api/auth/register", ALICE).get_json()
        client.delete(f"/api/persons/{created['personId']}", headers=admin_headers)

        # Act
        response = client.get("/api/auth/me")

        # Assert
        assert response.status_code == 401

    def test_logout_clears_cookie(self, client, db_session):
        # Arrange
        _post(client, "/api/auth/register", ALICE)

        # Act
        response = client.post("/api/auth/logout")

        # Assert
        assert response.status_code == 200
        assert "Max-Age=0" in response.headers["Set-Cookie"]
        assert client.get_cookie("token") is None
        assert client.get("/api/auth/me").status_code == 401


class TestUserProbe:

    def test_anonymous(self, client, db_session):
        response = client.get("/api/user/me")

        assert response.status_code == 200
        assert response.get_json() == {"authenticated": "false"}

    def test_authenticated(self, client, db_session, admin_headers):
        response = client.get("/api/user/me", headers=admin_headers)

        assert response.get_json() == {
            "authenticated": "true",
            "username": "admin_account",
            "role": "ADMIN",
        }


class TestGateThroughHttp:

    def test_expired_token_is_anonymous(self, client, db_session, jwt_secret):
        """Test that an expired token behaves exactly like no token."""
        headers = auth_headers(create_test_token(jwt_secret, expired=True))

        response = client.get("/api/user/me", headers=headers)

        assert response.get_json() == {"authenticated": "false"}

    @pytest.mark.parametrize(
        "overrides", [{"role": "ROOT"}, {"sub": "²"}], ids=["unknown-role", "superscript-subject"]
    )
    def test_bad_claims_are_rejected_before_the_view(self, client, db_session, jwt_secret, overrides):
        """Test that even a public endpoint answers 401 for undecodable claims."""
        headers = auth_headers(create_test_token(jwt_secret, **overrides))

        response = client.get("/api/user/me", headers=headers)

        assert response.status_code == 401
        assert response.get_json()["error"] == "TOKEN_ERROR"

    def test_health_is_public(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        data = response.get_json()
        assert data["error"] == "NOT_FOUND"
        assert data["path"] == "/api/does-not-exist"
        assert data["fieldErrors"] is None
