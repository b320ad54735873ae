"""Integration tests for login, request authentication and logout over HTTP."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from authserver.core.config import settings
from authserver.security.jwt_codec import JwtCodec, decode_secret

USER_PASSWORD = "Password1234!"


def _expired_access_token(user_id: int) -> str:
    issued_at = datetime.now(tz=timezone.utc) - timedelta(minutes=20)
    codec = JwtCodec(decode_secret(settings.JWT_SECRET), "HS512", clock=lambda: issued_at)
    return codec.issue(str(user_id), timedelta(minutes=10))


def _login(client, username: str) -> dict:
    response = client.post("/login", json={"username": username, "password": USER_PASSWORD})
    assert response.status_code == 200
    return response.json()


class TestLogin:
    def test_login_skips_authentication_and_returns_tokens(self, client, user, store):
        body = _login(client, user.username)

        assert body["user_id"] == user.id
        assert body["token_info"]["access_token"]
        assert store.get(f"refresh:{user.id}") == body["token_info"]["refresh_token"]

    def test_login_with_wrong_password(self, client, user):
        response = client.post("/login", json={"username": user.username, "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_login_with_unknown_user(self, client):
        response = client.post(
            "/login", json={"username": "nobody@example.com", "password": USER_PASSWORD}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND_USER"

    def test_sign_up_then_login(self, client):
        response = client.post(
            "/login/sign-up",
            json={"username": "new@example.com", "password": USER_PASSWORD},
        )

        assert response.status_code == 201
        assert response.json()["role"] == "USER"
        assert _login(client, "new@example.com")["user_id"] == response.json()["id"]

    def test_duplicate_sign_up_conflicts(self, client, user):
        response = client.post(
            "/login/sign-up",
            json={"username": user.username, "password": USER_PASSWORD},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT_USER"


class TestRequestAuthentication:
    def test_missing_header_is_rejected_before_handler(self, app, user):
        calls = []

        @app.get("/api/probe")
        def probe():
            calls.append(True)
            return {"ok": True}

        with TestClient(app) as client:
            response = client.get("/api/probe")

        assert response.status_code == 401
        assert response.json()["code"] == "MISSING_ACCESS_TOKEN"
        assert calls == []

    def test_profile_without_header(self, client):
        response = client.get("/api/profile")

        assert response.status_code == 401
        assert response.json() == {
            "code": "MISSING_ACCESS_TOKEN",
            "detail": "JWT token required for authentication is missing.",
        }

    def test_profile_with_valid_token(self, client, user):
        token = _login(client, user.username)["token_info"]["access_token"]

        response = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["id"] == user.id
        assert response.json()["authorities"] == ["ROLE_USER"]
        assert "authorization" not in response.headers

    def test_expired_token_is_reissued_in_response_header(self, client, app, user):
        _login(client, user.username)
        expired = _expired_access_token(user.id)

        response = client.get("/api/profile", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 200
        assert response.json()["id"] == user.id
        reissued = response.headers["Authorization"]
        assert reissued.startswith("Bearer ")
        token_manager = app.state.token_manager
        new_token = reissued[len("Bearer "):]
        assert token_manager.get_subject(new_token) == str(user.id)
        assert token_manager.is_valid(new_token) is True

    def test_expired_token_without_login_is_rejected(self, client, user):
        expired = _expired_access_token(user.id)

        response = client.get("/api/profile", headers={"Authorization": f"Bearer {expired}"})

        assert response.status_code == 401
        assert response.json()["code"] == "EXPIRED_REFRESH_TOKEN"

    def test_token_for_deleted_user_is_rejected(self, client, app):
        token = app.state.token_manager.create_token_pair(4242).access_token

        response = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["code"] == "USER_NOT_FOUND"

    def test_tampered_token_is_rejected(self, client, user):
        token = _login(client, user.username)["token_info"]["access_token"]

        response = client.get(
            "/api/profile", headers={"Authorization": f"Bearer {token}x.y"}
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    @pytest.mark.parametrize("path", ["/favicon.ico", "/css/app.css", "/index.html"])
    def test_white_listed_paths_bypass_authentication(self, client, path):
        assert client.get(path).status_code == 404

    @pytest.mark.parametrize("path", ["/docs", "/redoc", "/openapi.json"])
    def test_interactive_docs_are_not_served(self, client, user, path):
        token = _login(client, user.username)["token_info"]["access_token"]

        response = client.get(path, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 404


class TestLogout:
    def test_logout_prevents_reissue(self, client, user):
        token = _login(client, user.username)["token_info"]["access_token"]

        response = client.post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 204

        expired = _expired_access_token(user.id)
        response = client.get("/api/profile", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401
        assert response.json()["code"] == "EXPIRED_REFRESH_TOKEN"


class TestRoles:
    def test_admin_route_forbidden_for_user(self, client, user):
        token = _login(client, user.username)["token_info"]["access_token"]

        response = client.get("/api/admin/ping", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_admin_route_allowed_for_admin(self, client, admin):
        token = _login(client, admin.username)["token_info"]["access_token"]

        response = client.get("/api/admin/ping", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "user_id": admin.id}
