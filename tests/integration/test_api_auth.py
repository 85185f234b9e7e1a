# tests/integration/test_api_auth.py
from __future__ import annotations

from tests.factories.account import PASSWORD
from tests.helpers.http import AUTH_URL, bearer


class TestLogin:
    def test_returns_token_and_sets_cookie(self, client, register):
        register("alice")

        response = client.post(
            f"{AUTH_URL}/login", json={"username": "alice", "password": PASSWORD}
        )

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["username"] == "alice"
        assert data["token"].count(".") == 2
        assert "password" not in data

        cookie = response.headers["Set-Cookie"]
        assert cookie.startswith("authorization=")
        assert "HttpOnly" in cookie
        assert "SameSite=Strict" in cookie

    def test_wrong_password_and_unknown_user_look_the_same(self, client, register):
        register("alice")

        wrong = client.post(f"{AUTH_URL}/login", json={"username": "alice", "password": "nope!!"})
        ghost = client.post(f"{AUTH_URL}/login", json={"username": "ghost", "password": PASSWORD})

        assert wrong.status_code == ghost.status_code == 401
        assert wrong.get_json()["detail"] == ghost.get_json()["detail"]
        assert "Set-Cookie" not in wrong.headers

    def test_missing_fields(self, client):
        response = client.post(f"{AUTH_URL}/login", json={"username": "alice"})
        assert response.status_code == 400


class TestStatus:
    def test_anonymous(self, client):
        response = client.get(f"{AUTH_URL}/status")

        assert response.status_code == 200
        assert response.get_json() == {"data": False}

    def test_with_header(self, client, register, login):
        register("alice")
        token = login("alice")
        client.post(f"{AUTH_URL}/logout")

        assert client.get(f"{AUTH_URL}/status", headers=bearer(token)).get_json() == {"data": True}
        assert client.get(f"{AUTH_URL}/status").get_json() == {"data": False}

    def test_with_cookie(self, client, register, login):
        register("alice")
        login("alice")

        assert client.get(f"{AUTH_URL}/status").get_json() == {"data": True}

    def test_garbage_token(self, client):
        response = client.get(f"{AUTH_URL}/status", headers=bearer("not.a.jwt"))
        assert response.get_json() == {"data": False}


class TestCurrentUser:
    def test_private_view(self, client, register, login):
        alice = register("alice")
        token = login("alice")

        response = client.get(f"{AUTH_URL}/user", headers=bearer(token))

        assert response.status_code == 200
        assert response.get_json()["data"] == alice

    def test_unauthenticated_is_problem_json(self, client):
        response = client.get(f"{AUTH_URL}/user")

        assert response.status_code == 401
        assert response.mimetype == "application/problem+json"
        body = response.get_json()
        assert body["code"] == "unauthorized"
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_header_without_bearer_scheme(self, client, register, login):
        register("alice")
        token = login("alice")

        response = client.get(f"{AUTH_URL}/user", headers={"Authorization": token})

        # A present header disables the cookie fallback.
        assert response.status_code == 401


class TestLogout:
    def test_clears_cookie(self, client, register, login):
        register("alice")
        login("alice")
        assert client.get(f"{AUTH_URL}/status").get_json() == {"data": True}

        response = client.post(f"{AUTH_URL}/logout")

        assert response.status_code == 200
        assert response.get_json() == {"data": None}
        assert client.get(f"{AUTH_URL}/status").get_json() == {"data": False}

    def test_token_survives_logout(self, client, register, login):
        """Tokens are stateless; only a password change revokes them."""
        register("alice")
        token = login("alice")

        client.post(f"{AUTH_URL}/logout")

        assert client.get(f"{AUTH_URL}/user", headers=bearer(token)).status_code == 200
