"""HTTP-level helpers shared by the API tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from flask.testing import FlaskClient

from tests.factories.account import PASSWORD
from tests.helpers.http import AUTH_URL, USERS_URL


@pytest.fixture()
def register(client: FlaskClient) -> Callable[..., dict[str, Any]]:
    """Create an account through the API and return its private view."""

    def _register(username: str, *, password: str = PASSWORD, email: str | None = None):
        response = client.post(
            USERS_URL,
            json={
                "username": username,
                "password": password,
                "email": email or f"{username}@example.com",
            },
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]

    return _register


@pytest.fixture()
def login(client: FlaskClient) -> Callable[..., str]:
    """Log in and return the issued bearer token."""

    def _login(username: str, password: str = PASSWORD) -> str:
        response = client.post(
            f"{AUTH_URL}/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.get_json()
        return response.get_json()["data"]["token"]

    return _login
