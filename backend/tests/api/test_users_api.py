"""HTTP tests for the ``/api/v1/users`` endpoints."""

from __future__ import annotations

import pytest

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from videotube.repositories.user import UserRepository

BASE = "/api/v1/users"


def _login(client, user) -> dict:
    resp = client.post(
        f"{BASE}/login", json={"username": user.username, "password": DEFAULT_PASSWORD}
    )
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


@pytest.fixture()
def bare_client(app):
    """Client that never sends cookies, for header and body token transport."""
    return app.test_client(use_cookies=False)


# ------------------------------ Registration ------------------------------ #
class TestRegister:
    def test_created_without_secrets(self, client):
        resp = client.post(
            f"{BASE}/register",
            json={
                "username": "Alice",
                "email": "a@x.com",
                "fullName": "Alice",
                "password": "p1",
                "avatar": "http://cdn/a.png",
            },
        )

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["username"] == "alice"
        assert data["coverImage"] is None
        assert data["watchHistory"] == []
        for secret in ("password", "passwordHash", "password_hash", "refreshToken"):
            assert secret not in data

    def test_missing_avatar_is_a_validation_failure(self, client):
        resp = client.post(
            f"{BASE}/register",
            json={"username": "a", "email": "a@x.com", "fullName": "A", "password": "p1"},
        )

        assert resp.status_code == 400
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["code"] == "validation_failed"

    def test_duplicate_handle_conflicts(self, client):
        UserFactory(username="alice")
        resp = client.post(
            f"{BASE}/register",
            json={
                "username": "ALICE",
                "email": "other@x.com",
                "fullName": "Alice",
                "password": "p1",
                "avatar": "http://cdn/a.png",
            },
        )

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "duplicate_user"


# --------------------------------- Login ---------------------------------- #
class TestLogin:
    def test_sets_http_only_cookies(self, client):
        user = UserFactory()
        data = _login(client, user)

        assert data["user"]["id"] == user.id
        access = client.get_cookie("accessToken")
        refresh = client.get_cookie("refreshToken")
        assert access is not None and access.value == data["accessToken"]
        assert refresh is not None and refresh.value == data["refreshToken"]
        assert access.http_only and refresh.http_only

    def test_login_by_email(self, client):
        user = UserFactory(email="bob@x.com")
        resp = client.post(
            f"{BASE}/login", json={"email": "bob@x.com", "password": DEFAULT_PASSWORD}
        )
        assert resp.status_code == 200
        assert resp.get_json()["data"]["user"]["id"] == user.id

    def test_wrong_password(self, client):
        user = UserFactory()
        resp = client.post(f"{BASE}/login", json={"username": user.username, "password": "nope"})
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_credentials"
        assert client.get_cookie("accessToken") is None

    def test_unknown_user(self, client):
        resp = client.post(f"{BASE}/login", json={"username": "ghost", "password": "x"})
        assert resp.status_code == 404


# ------------------------------ Access guard ------------------------------ #
class TestCurrentUser:
    def test_via_cookie(self, client):
        user = UserFactory()
        _login(client, user)

        resp = client.get(f"{BASE}/current-user")

        assert resp.status_code == 200
        assert resp.get_json()["data"]["email"] == user.email

    def test_via_bearer_header(self, client, bare_client):
        user = UserFactory()
        token = _login(client, user)["accessToken"]

        resp = bare_client.get(
            f"{BASE}/current-user", headers={"Authorization": f"Bearer {token}"}
        )

        assert resp.status_code == 200

    def test_without_token(self, bare_client):
        resp = bare_client.get(f"{BASE}/current-user")
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "unauthorized"

    def test_garbage_token(self, bare_client):
        resp = bare_client.get(
            f"{BASE}/current-user", headers={"Authorization": "Bearer not-a-jwt"}
        )
        body = resp.get_json()
        assert resp.status_code == 401
        assert body["code"] == "invalid_token"
        assert body["details"]["reason"] == "MALFORMED"

    def test_refresh_token_is_not_an_access_token(self, client, bare_client):
        refresh = _login(client, UserFactory())["refreshToken"]
        resp = bare_client.get(
            f"{BASE}/current-user", headers={"Authorization": f"Bearer {refresh}"}
        )
        assert resp.status_code == 401


# ------------------------------ Refresh/logout ---------------------------- #
class TestSessionLifecycle:
    def test_cookie_refresh_rotates_and_old_token_is_rejected(
        self, client, bare_client, session
    ):
        user = UserFactory()
        first = _login(client, user)["refreshToken"]

        resp = client.post(f"{BASE}/refresh-token")
        assert resp.status_code == 200
        second = resp.get_json()["data"]["refreshToken"]
        assert second != first
        assert client.get_cookie("refreshToken").value == second
        assert UserRepository(session=session).get_refresh_token(user.id) == second

        reuse = bare_client.post(f"{BASE}/refresh-token", json={"refreshToken": first})
        assert reuse.status_code == 401
        assert reuse.mimetype == "application/problem+json"
        assert reuse.get_json()["code"] == "token_reuse_or_expired"

    def test_refresh_from_body(self, client, bare_client):
        token = _login(client, UserFactory())["refreshToken"]
        resp = bare_client.post(f"{BASE}/refresh-token", json={"refreshToken": token})
        assert resp.status_code == 200
        assert set(resp.get_json()["data"]) == {"accessToken", "refreshToken"}

    def test_refresh_without_token(self, bare_client):
        resp = bare_client.post(f"{BASE}/refresh-token", json={})
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "unauthorized"

    def test_logout_clears_cookies_and_session(self, client, bare_client, session):
        user = UserFactory()
        token = _login(client, user)["refreshToken"]

        resp = client.post(f"{BASE}/logout")

        assert resp.status_code == 200
        assert client.get_cookie("accessToken") is None
        assert client.get_cookie("refreshToken") is None
        assert UserRepository(session=session).get_refresh_token(user.id) is None

        again = bare_client.post(f"{BASE}/refresh-token", json={"refreshToken": token})
        assert again.status_code == 401
        assert again.get_json()["code"] == "unauthorized"

    def test_logout_requires_authentication(self, bare_client):
        assert bare_client.post(f"{BASE}/logout").status_code == 401


# -------------------------------- Profile --------------------------------- #
class TestProfile:
    def test_change_password(self, client):
        user = UserFactory()
        _login(client, user)

        resp = client.post(
            f"{BASE}/change-password",
            json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "N3w-secret"},
        )
        assert resp.status_code == 200

        relog = client.post(
            f"{BASE}/login", json={"username": user.username, "password": "N3w-secret"}
        )
        assert relog.status_code == 200

    def test_change_password_wrong_old(self, client):
        _login(client, UserFactory())
        resp = client.post(
            f"{BASE}/change-password", json={"oldPassword": "bad", "newPassword": "x"}
        )
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_credentials"

    def test_update_account(self, client):
        _login(client, UserFactory())
        resp = client.patch(
            f"{BASE}/update-account", json={"fullName": "New Name", "email": "New@X.com"}
        )
        data = resp.get_json()["data"]
        assert resp.status_code == 200
        assert data["fullName"] == "New Name"
        assert data["email"] == "new@x.com"

    def test_update_account_requires_a_field(self, client):
        _login(client, UserFactory())
        resp = client.patch(f"{BASE}/update-account", json={})
        assert resp.status_code == 400

    def test_update_account_email_taken(self, client):
        UserFactory(email="taken@x.com")
        _login(client, UserFactory())
        resp = client.patch(f"{BASE}/update-account", json={"email": "taken@x.com"})
        assert resp.status_code == 409

    def test_avatar_and_cover_image(self, client):
        _login(client, UserFactory())

        avatar = client.patch(f"{BASE}/avatar", json={"avatar": "http://cdn/new.png"})
        cover = client.patch(f"{BASE}/cover-image", json={"coverImage": "http://cdn/c.png"})

        assert avatar.status_code == 200
        assert avatar.get_json()["data"]["avatar"] == "http://cdn/new.png"
        assert cover.status_code == 200
        assert cover.get_json()["data"]["coverImage"] == "http://cdn/c.png"

    def test_blank_avatar(self, client):
        _login(client, UserFactory())
        resp = client.patch(f"{BASE}/avatar", json={"avatar": " "})
        assert resp.status_code == 400


# ----------------------------- Watch history ------------------------------ #
class TestWatchHistory:
    def test_record_and_list(self, client):
        _login(client, UserFactory())

        for video in ("v1", "v2", "v1"):
            assert client.post(f"{BASE}/history", json={"videoId": video}).status_code == 201

        resp = client.get(f"{BASE}/history")
        assert resp.status_code == 200
        assert resp.get_json()["data"] == ["v2", "v1"]

    def test_bad_entry_is_unprocessable(self, client):
        _login(client, UserFactory())
        resp = client.post(f"{BASE}/history", json={"video": "v1"})
        assert resp.status_code == 422
        assert resp.get_json()["code"] == "validation_error"


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"


def test_responses_carry_request_id(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
