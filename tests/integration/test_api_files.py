# tests/integration/test_api_files.py
from __future__ import annotations

import base64

import pytest

from lockbox.core.container import EXTENSION_KEY
from lockbox.services._shared.results import Ok
from tests.helpers.http import AUTH_URL, FILES_URL, USERS_URL, bearer

PAYLOAD = b"\x00\x01binary\xffpayload"
ENCODED = base64.b64encode(PAYLOAD).decode()


@pytest.fixture()
def alice_token(register, login) -> str:
    register("alice")
    return login("alice")


@pytest.fixture()
def bob_token(register, login) -> str:
    register("bob")
    return login("bob")


def _upload(client, token, **overrides):
    body = {"name": "blob.bin", "mime_type": "application/octet-stream", "data": ENCODED}
    body.update(overrides)
    return client.post(FILES_URL, json=body, headers=bearer(token))


class TestCreateFile:
    def test_owner_is_the_caller(self, client, alice_token):
        me = client.get(f"{AUTH_URL}/user", headers=bearer(alice_token)).get_json()["data"]

        response = _upload(client, alice_token)

        assert response.status_code == 201
        data = response.get_json()["data"]
        assert data["owner_id"] == me["id"]
        assert data["name"] == "blob.bin"
        assert data["data"] == ENCODED
        assert set(data) == {"id", "owner_id", "created_at", "mime_type", "name", "data"}

    def test_owner_id_in_body_is_rejected(self, client, alice_token):
        response = _upload(client, alice_token, owner_id=42)
        assert response.status_code == 400

    def test_invalid_base64(self, client, alice_token):
        response = _upload(client, alice_token, data="***not base64***")

        assert response.status_code == 400
        assert response.get_json()["details"]["errors"] == {"data": ["Not valid base64 data."]}

    def test_invalid_mime_type(self, client, alice_token):
        response = _upload(client, alice_token, mime_type="nonsense")

        assert response.status_code == 400
        assert list(response.get_json()["details"]["errors"]) == ["mime_type"]

    def test_requires_authentication(self, client):
        response = client.post(
            FILES_URL, json={"name": "a.txt", "mime_type": "text/plain", "data": ""}
        )
        assert response.status_code == 401


class TestReadFile:
    def test_owner_reads_payload_back(self, client, alice_token):
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        response = client.get(f"{FILES_URL}/{file_id}", headers=bearer(alice_token))

        assert response.status_code == 200
        assert base64.b64decode(response.get_json()["data"]["data"]) == PAYLOAD

    def test_other_account_sees_not_found(self, client, alice_token, bob_token):
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        hidden = client.get(f"{FILES_URL}/{file_id}", headers=bearer(bob_token))
        missing = client.get(f"{FILES_URL}/{file_id + 100}", headers=bearer(bob_token))

        assert hidden.status_code == missing.status_code == 404
        assert hidden.get_json()["detail"] == missing.get_json()["detail"]


class TestUpdateFile:
    def test_patch_keeps_other_fields(self, client, alice_token):
        created = _upload(client, alice_token).get_json()["data"]

        response = client.patch(
            f"{FILES_URL}/{created['id']}",
            json={"name": "renamed.bin"},
            headers=bearer(alice_token),
        )

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["name"] == "renamed.bin"
        assert data["data"] == created["data"]
        assert data["mime_type"] == created["mime_type"]

    def test_other_account_cannot_patch(self, client, alice_token, bob_token):
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        response = client.patch(
            f"{FILES_URL}/{file_id}", json={"name": "pwned"}, headers=bearer(bob_token)
        )

        assert response.status_code == 404
        unchanged = client.get(f"{FILES_URL}/{file_id}", headers=bearer(alice_token))
        assert unchanged.get_json()["data"]["name"] == "blob.bin"

    def test_invalid_patch(self, client, alice_token):
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        response = client.patch(
            f"{FILES_URL}/{file_id}", json={"name": ""}, headers=bearer(alice_token)
        )

        assert response.status_code == 400


class TestDeleteFile:
    def test_owner_deletes(self, client, alice_token):
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        deleted = client.delete(f"{FILES_URL}/{file_id}", headers=bearer(alice_token))

        assert deleted.status_code == 204
        assert client.get(f"{FILES_URL}/{file_id}", headers=bearer(alice_token)).status_code == 404

    def test_other_account_cannot_delete(self, client, alice_token, bob_token):
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        assert client.delete(f"{FILES_URL}/{file_id}", headers=bearer(bob_token)).status_code == 404
        assert client.get(f"{FILES_URL}/{file_id}", headers=bearer(alice_token)).status_code == 200

    def test_files_outlive_their_owner(self, app, client, alice_token):
        """Deleting an account leaves its files stored, unreachable over HTTP."""
        file_id = _upload(client, alice_token).get_json()["data"]["id"]

        client.delete(f"{USERS_URL}/me", headers=bearer(alice_token))

        assert isinstance(app.extensions[EXTENSION_KEY].files.get_by_id(file_id), Ok)

    def test_new_account_does_not_inherit_orphaned_files(self, client, register, login):
        alice = register("alice")
        alice_token = login("alice")
        file_id = _upload(client, alice_token).get_json()["data"]["id"]
        client.delete(f"{USERS_URL}/me", headers=bearer(alice_token))

        mallory = register("mallory")
        mallory_token = login("mallory")

        assert mallory["id"] != alice["id"]
        response = client.get(f"{FILES_URL}/{file_id}", headers=bearer(mallory_token))
        assert response.status_code == 404
