"""Tests for the id directory endpoints."""

from typing import Any

from fastapi import FastAPI, status
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from syrja_broker.api.dependencies import get_directory_store
from syrja_broker.services.directory import DirectoryStore


def _claim(
    client: TestClient,
    custom_id: str,
    pubkey: str,
    *,
    invite: str = "invite-code",
    persistence: str = "permanent",
) -> Any:
    return client.post(
        "/claim-id",
        json={
            "customId": custom_id,
            "fullInviteCode": invite,
            "persistence": persistence,
            "pubKey": pubkey,
        },
    )


def test_claim_and_get_invite(client: TestClient, alice: dict[str, Any]) -> None:
    """A claimed id resolves through the namespaced lookup route."""
    r = _claim(client, "syrja/alice", alice["pubkey"], invite="INVITE-ALICE")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"success": True, "id": "syrja/alice"}

    r = client.get("/get-invite/alice")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"fullInviteCode": "INVITE-ALICE"}


def test_claim_missing_field(client: TestClient, alice: dict[str, Any]) -> None:
    r = client.post(
        "/claim-id",
        json={"customId": "syrja/alice", "fullInviteCode": "x", "pubKey": alice["pubkey"]},
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["error"] == "missing_fields"
    assert r.json()["detail"] == "Missing required fields"


def test_claim_without_body(client: TestClient) -> None:
    """An absent or null body fails like a body with every field missing."""
    empty = client.post("/claim-id")
    null = client.post("/claim-id", content="null", headers={"content-type": "application/json"})

    for r in (empty, null):
        assert r.status_code == status.HTTP_400_BAD_REQUEST
        assert r.json() == {"error": "missing_fields", "detail": "Missing required fields"}


def test_claim_with_wrong_field_type(client: TestClient, alice: dict[str, Any]) -> None:
    r = client.post(
        "/claim-id",
        json={
            "customId": 123,
            "fullInviteCode": "x",
            "persistence": "permanent",
            "pubKey": alice["pubkey"],
        },
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["error"] == "invalid_request"


def test_claim_taken_by_other_key(
    client: TestClient, alice: dict[str, Any], bob: dict[str, Any]
) -> None:
    assert _claim(client, "syrja/shared", alice["pubkey"]).status_code == status.HTTP_200_OK

    r = _claim(client, "syrja/shared", bob["pubkey"], invite="hijack")
    assert r.status_code == status.HTTP_409_CONFLICT
    assert r.json()["error"] == "id_taken"

    assert client.get("/get-invite/shared").json() == {"fullInviteCode": "invite-code"}


def test_reclaim_by_owner_updates_invite(client: TestClient, alice: dict[str, Any]) -> None:
    _claim(client, "syrja/alice", alice["pubkey"], invite="first")
    r = _claim(client, "syrja/alice", alice["pubkey"], invite="second", persistence="temporary")
    assert r.status_code == status.HTTP_200_OK

    assert client.get("/get-invite/alice").json() == {"fullInviteCode": "second"}
    r = client.get(f"/get-id-by-pubkey/{alice['pubkey']}")
    assert r.json() == {"id": "syrja/alice", "permanent": False}


def test_get_invite_not_found(client: TestClient) -> None:
    r = client.get("/get-invite/missing")
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["error"] == "not_found"


def test_get_id_by_pubkey(client: TestClient, alice: dict[str, Any]) -> None:
    """Base64 keys may contain slashes and still route correctly."""
    _claim(client, "syrja/alice", alice["pubkey"])

    r = client.get(f"/get-id-by-pubkey/{alice['pubkey']}")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"id": "syrja/alice", "permanent": True}

    r = client.get("/get-id-by-pubkey/a/b/c")
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_delete_id(client: TestClient, alice: dict[str, Any]) -> None:
    _claim(client, "syrja/alice", alice["pubkey"])

    r = client.post("/delete-id", json={"pubKey": alice["pubkey"]})
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"success": True}
    assert client.get("/get-invite/alice").status_code == status.HTTP_404_NOT_FOUND


def test_delete_id_without_record_is_success(client: TestClient, bob: dict[str, Any]) -> None:
    r = client.post("/delete-id", json={"pubKey": bob["pubkey"]})
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"success": True, "message": "No ID found to delete"}


def test_delete_id_requires_pubkey(client: TestClient) -> None:
    r = client.post("/delete-id", json={})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["detail"] == "Public key is required"


def test_delete_id_without_body(client: TestClient) -> None:
    r = client.post("/delete-id")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json() == {"error": "missing_fields", "detail": "Public key is required"}


def test_suggest_id_is_namespaced(client: TestClient) -> None:
    r = client.get("/suggest-id")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["id"].startswith("syrja/")


def test_storage_failure_returns_server_error(
    app: FastAPI, client: TestClient, mocker: Any
) -> None:
    """Storage errors surface as a 500 without taking the service down."""
    broken = mocker.MagicMock(spec=DirectoryStore)
    broken.resolve.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
    app.dependency_overrides[get_directory_store] = lambda: broken
    try:
        r = client.get("/get-invite/alice")
    finally:
        app.dependency_overrides.pop(get_directory_store, None)

    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert r.json()["error"] == "storage_error"
    assert client.get("/health").status_code == status.HTTP_200_OK
