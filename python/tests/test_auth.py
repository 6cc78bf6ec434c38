"""Integration tests for registration, login and the auth boundary.

Tests the full auth flow including:
- Register and login responses (body token + X-Auth-Token header)
- Password hashing and credential checks
- Bearer token validation on protected routes
- GET/PATCH /me and GET /users/{id}
"""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from huddle.auth.passwords import hash_password, verify_password
from huddle.db.models import User
from tests.factories import DEFAULT_PASSWORD, create_test_user
from tests.helpers import (
    auth_headers,
    error_code,
    mint_expired_token,
    mint_token_with_bad_signature,
)


def _register(client: TestClient, username="alice", email="alice@x.com", password="password123"):
    return client.post(
        "/auth/register",
        json={"username": username, "email": email, "password": password},
    )


class TestPasswords:
    """Tests for argon2id password hashing."""

    def test_hash_is_not_plaintext_and_verifies(self):
        """The stored hash differs from the raw password and verifies it."""
        hashed = hash_password("password123")

        assert hashed != "password123"
        assert hashed.startswith("$argon2id$")
        assert verify_password(hashed, "password123") is True
        assert verify_password(hashed, "wrong-password") is False

    def test_garbage_hash_does_not_verify(self):
        """An unrecognized hash fails closed."""
        assert verify_password("not-a-hash", "password123") is False


class TestRegister:
    """Tests for POST /auth/register."""

    def test_register_returns_user_and_token(self, auth_client: TestClient):
        """Register returns 201, the private profile, and a session token."""
        response = _register(auth_client)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["username"] == "alice"
        assert data["user"]["email"] == "alice@x.com"
        assert data["user"]["friends_count"] == 0
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]
        assert data["token"]
        assert response.headers["X-Auth-Token"] == data["token"]

    def test_register_token_authenticates(self, auth_client: TestClient):
        """The returned token is accepted on protected routes."""
        token = _register(auth_client).json()["data"]["token"]

        response = auth_client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "alice"

    def test_register_hashes_password(self, auth_client: TestClient, db_session: Session):
        """The stored credential is an argon2id hash, never the raw password."""
        _register(auth_client)

        user = db_session.scalar(select(User).where(User.username == "alice"))
        assert user.password_hash != "password123"
        assert verify_password(user.password_hash, "password123")

    def test_register_lowercases_email(self, auth_client: TestClient):
        """Emails are stored lowercased."""
        response = _register(auth_client, email="Alice@X.COM")

        assert response.json()["data"]["user"]["email"] == "alice@x.com"

    @pytest.mark.parametrize(
        "username,email",
        [("alice", "other@x.com"), ("other", "alice@x.com"), ("other", "ALICE@x.com")],
    )
    def test_duplicate_username_or_email_rejected(self, auth_client, username, email):
        """A taken username or email is a 400 E_USER_EXISTS."""
        _register(auth_client)

        response = _register(auth_client, username=username, email=email)

        assert response.status_code == 400
        assert error_code(response) == "E_USER_EXISTS"

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "bob", "email": "bob@x.com", "password": "short"},
            {"username": "bob", "email": "not-an-email", "password": "password123"},
            {"username": "has space", "email": "bob@x.com", "password": "password123"},
            {"username": "", "email": "bob@x.com", "password": "password123"},
        ],
    )
    def test_invalid_registration_rejected(self, auth_client, payload):
        """Invalid fields are a 400 E_INVALID_REQUEST."""
        response = auth_client.post("/auth/register", json=payload)

        assert response.status_code == 400
        assert error_code(response) == "E_INVALID_REQUEST"


class TestLogin:
    """Tests for POST /auth/login."""

    def test_login_success(self, auth_client: TestClient, db_session: Session):
        """Correct credentials return a token and stamp last_login_at."""
        user = create_test_user(db_session, email="bob@x.com")
        assert user.last_login_at is None

        response = auth_client.post(
            "/auth/login", json={"email": "BOB@x.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(user.id)
        assert data["user"]["last_login_at"] is not None
        assert response.headers["X-Auth-Token"] == data["token"]

    def test_wrong_password_and_unknown_email_look_the_same(
        self, auth_client: TestClient, db_session: Session
    ):
        """Both failures are 401 E_INVALID_CREDENTIALS with the same message."""
        create_test_user(db_session, email="bob@x.com")

        wrong_password = auth_client.post(
            "/auth/login", json={"email": "bob@x.com", "password": "nope-nope-nope"}
        )
        unknown_email = auth_client.post(
            "/auth/login", json={"email": "nobody@x.com", "password": "nope-nope-nope"}
        )

        for response in (wrong_password, unknown_email):
            assert response.status_code == 401
            assert error_code(response) == "E_INVALID_CREDENTIALS"
        assert wrong_password.json()["error"]["message"] == unknown_email.json()["error"]["message"]


class TestAuthBoundary:
    """Tests that unauthenticated requests are rejected correctly."""

    def test_no_authorization_header(self, auth_client):
        """No Authorization header returns 401 E_UNAUTHENTICATED."""
        response = auth_client.get("/me")

        assert response.status_code == 401
        assert error_code(response) == "E_UNAUTHENTICATED"

    def test_wrong_authorization_format(self, auth_client):
        """Authorization header with the wrong scheme returns 401."""
        response = auth_client.get("/me", headers={"Authorization": "Basic abc123"})

        assert response.status_code == 401
        assert error_code(response) == "E_UNAUTHENTICATED"

    def test_expired_token(self, auth_client):
        """An expired token returns 401."""
        token = mint_expired_token(uuid4())

        response = auth_client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Token expired"

    def test_bad_signature(self, auth_client):
        """A token signed with another key returns 401."""
        token = mint_token_with_bad_signature(uuid4())

        response = auth_client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert error_code(response) == "E_UNAUTHENTICATED"

    def test_garbage_token(self, auth_client):
        """A malformed token returns 401."""
        response = auth_client.get("/me", headers={"Authorization": "Bearer not.a.jwt"})

        assert response.status_code == 401


class TestProfile:
    """Tests for /me and /users/{id}."""

    def test_get_me_includes_private_fields(self, auth_client, db_session):
        """GET /me returns email and login time."""
        user = create_test_user(db_session, username="carol", email="carol@x.com")

        response = auth_client.get("/me", headers=auth_headers(user.id))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "carol@x.com"
        assert "last_login_at" in data

    def test_token_for_deleted_user_is_404(self, auth_client):
        """A valid token for a user that no longer exists gets 404 on /me."""
        response = auth_client.get("/me", headers=auth_headers(uuid4()))

        assert response.status_code == 404
        assert error_code(response) == "E_USER_NOT_FOUND"

    def test_patch_me_updates_only_sent_fields(self, auth_client, db_session):
        """PATCH /me is a partial update."""
        user = create_test_user(db_session, first_name="Carol", last_name="Smith")

        response = auth_client.patch(
            "/me",
            json={"bio": "hello there", "is_private": True},
            headers=auth_headers(user.id),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["bio"] == "hello there"
        assert data["is_private"] is True
        assert data["first_name"] == "Carol"
        assert data["last_name"] == "Smith"

    def test_get_user_is_public_profile(self, auth_client, db_session):
        """GET /users/{id} omits private fields."""
        viewer = create_test_user(db_session)
        other = create_test_user(db_session, username="dave")

        response = auth_client.get(f"/users/{other.id}", headers=auth_headers(viewer.id))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "dave"
        assert "email" not in data

    def test_get_user_not_found(self, auth_client, db_session):
        """Unknown users are 404 E_USER_NOT_FOUND."""
        viewer = create_test_user(db_session)

        response = auth_client.get(f"/users/{uuid4()}", headers=auth_headers(viewer.id))

        assert response.status_code == 404
        assert error_code(response) == "E_USER_NOT_FOUND"

    def test_invalid_path_id_is_400(self, auth_client, db_session):
        """A non-UUID path id is a 400 E_INVALID_REQUEST."""
        viewer = create_test_user(db_session)

        response = auth_client.get("/users/not-a-uuid", headers=auth_headers(viewer.id))

        assert response.status_code == 400
        assert error_code(response) == "E_INVALID_REQUEST"
