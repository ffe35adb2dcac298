"""Tests for authentication services, bearer tokens and the session gate."""

from datetime import timedelta

import pytest

from billtracker.core.errors import AuthenticationRequired
from billtracker.services.auth import (
    authenticate_user,
    create_access_token,
    decode_token,
    get_password_hash,
    get_user_by_email,
    verify_password,
)

# =============================================================================
# Unit Tests: Password Hashing
# =============================================================================


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_get_password_hash_returns_bcrypt_format(self):
        """Test that hash is in bcrypt format."""
        hashed = get_password_hash("password123")
        assert hashed.startswith("$2")

    def test_get_password_hash_different_for_same_input(self):
        """Test that same password produces different hashes (due to salt)."""
        assert get_password_hash("password123") != get_password_hash("password123")

    def test_verify_password_correct(self):
        hashed = get_password_hash("mysecretpassword")
        assert verify_password("mysecretpassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("correctpassword")
        assert verify_password("wrongpassword", hashed) is False

    def test_verify_password_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


# =============================================================================
# Unit Tests: Bearer Tokens
# =============================================================================


class TestTokens:
    """Tests for bearer token functions."""

    def test_decode_token_valid(self):
        token = create_access_token(data={"sub": "owner@example.com"})
        assert decode_token(token).email == "owner@example.com"

    def test_decode_token_expired(self):
        token = create_access_token(
            data={"sub": "owner@example.com"},
            expires_delta=timedelta(seconds=-1),
        )
        with pytest.raises(AuthenticationRequired):
            decode_token(token)

    def test_decode_token_invalid(self):
        with pytest.raises(AuthenticationRequired) as exc_info:
            decode_token("invalid.token.here")
        assert "Could not validate credentials" in exc_info.value.message

    def test_decode_token_missing_subject(self):
        token = create_access_token(data={"other": "data"})
        with pytest.raises(AuthenticationRequired):
            decode_token(token)


# =============================================================================
# Unit Tests: User Lookup
# =============================================================================


class TestUserLookup:
    """Tests for user database operations."""

    def test_get_user_by_email_is_case_insensitive(self, test_db, test_user):
        user = get_user_by_email(test_db, "  OWNER@example.com ")
        assert user is not None
        assert user.id == test_user.id

    def test_authenticate_user_valid(self, test_db, test_user, user_password):
        assert authenticate_user(test_db, test_user.email, user_password) is not None

    def test_authenticate_user_wrong_password(self, test_db, test_user):
        assert authenticate_user(test_db, test_user.email, "wrong") is None

    def test_authenticate_inactive_user(self, test_db, test_user, user_password):
        test_user.is_active = False
        test_db.commit()
        assert authenticate_user(test_db, test_user.email, user_password) is None


# =============================================================================
# API Tests
# =============================================================================


class TestTokenEndpoint:
    """Tests for POST /api/auth/token."""

    def test_issue_token(self, client, test_user, user_password):
        response = client.post(
            "/api/auth/token",
            json={"email": test_user.email, "password": user_password},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"

        me = client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {data['access_token']}"},
        )
        assert me.status_code == 200
        assert me.json()["email"] == test_user.email

    def test_wrong_password(self, client, test_user):
        response = client.post(
            "/api/auth/token",
            json={"email": test_user.email, "password": "nope"},
        )
        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Incorrect email or password"}

    def test_missing_field_is_bad_request(self, client):
        response = client.post("/api/auth/token", json={"email": "a@b.c"})
        assert response.status_code == 400
        assert response.json()["ok"] is False
        assert "password" in response.json()["error"]

    def test_me_requires_auth(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Auth session missing!"}


class TestWebSignIn:
    """Tests for the sign-in page and the session gate."""

    def test_sign_in_page_renders(self, client):
        response = client.get("/auth/sign-in")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert 'name="password"' in response.text

    def test_sign_in_sets_session_and_redirects(self, client, test_user, user_password):
        response = client.post(
            "/auth/sign-in",
            data={
                "email": test_user.email,
                "password": user_password,
                "redirect": "/uploads/",
            },
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/uploads/"

        me = client.get("/api/auth/me")
        assert me.status_code == 200

    def test_sign_in_rejects_external_redirect(self, client, test_user, user_password):
        response = client.post(
            "/auth/sign-in",
            data={
                "email": test_user.email,
                "password": user_password,
                "redirect": "//evil.example.com",
            },
            follow_redirects=False,
        )
        assert response.headers["location"] == "/uploads"

    def test_sign_in_invalid_credentials(self, client, test_user):
        response = client.post(
            "/auth/sign-in",
            data={"email": test_user.email, "password": "wrong"},
        )
        assert response.status_code == 400
        assert "Invalid email or password" in response.text

    def test_sign_out_clears_session(self, client, test_user, user_password):
        client.post(
            "/auth/sign-in",
            data={"email": test_user.email, "password": user_password},
            follow_redirects=False,
        )
        response = client.get("/auth/sign-out", follow_redirects=False)
        assert response.status_code == 303
        assert client.get("/api/auth/me").status_code == 401

    def test_pages_redirect_with_redirect_param(self, client):
        response = client.get("/uploads/", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/auth/sign-in?redirect=%2Fuploads%2F"

    def test_home_redirects_to_sign_in(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"].startswith("/auth/sign-in?redirect=")
