"""
tests/test_folder_routes.py -- Integration tests for /api/folders.

Coverage:
  - 401 without a session token on every route
  - Create 201 with trimmed name; empty and 101-char names are 400
  - List is newest first, includes flashcard counts, only the caller's folders
  - Rename / delete: 404 unknown id, 403 other user's folder
  - Delete removes the folder's flashcards too
"""

from __future__ import annotations

import pytest


def _create_folder(client, user, name: str = "Spanish") -> dict:
    resp = client.post("/api/folders", json={"name": name}, headers=user.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["folder"]


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/folders"),
        ("post", "/api/folders"),
        ("put", "/api/folders/1"),
        ("delete", "/api/folders/1"),
    ],
)
def test_requires_session_token(api_client, method, path) -> None:
    client, _ = api_client
    resp = client.request(method.upper(), path, json={"name": "x"})
    assert resp.status_code == 401


def test_create_folder_trims_name(api_client, make_user) -> None:
    client, _ = api_client
    user = make_user()
    folder = _create_folder(client, user, "  Biology  ")
    assert folder["name"] == "Biology"
    assert folder["flashcardCount"] == 0
    assert isinstance(folder["id"], int)
    assert folder["createdAt"]


@pytest.mark.parametrize("name", ["", "   ", "x" * 101])
def test_invalid_folder_name_is_400(api_client, make_user, name) -> None:
    client, _ = api_client
    user = make_user()
    resp = client.post("/api/folders", json={"name": name}, headers=user.headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"
    assert client.get("/api/folders", headers=user.headers).json()["folders"] == []


def test_folder_name_at_limit_is_accepted(api_client, make_user) -> None:
    client, _ = api_client
    user = make_user()
    assert _create_folder(client, user, "x" * 100)["name"] == "x" * 100


def test_list_folders_only_own_newest_first_with_counts(api_client, make_user) -> None:
    client, _ = api_client
    alice, bob = make_user(), make_user()
    first = _create_folder(client, alice, "First")
    second = _create_folder(client, alice, "Second")
    _create_folder(client, bob, "Bob's")
    client.post(
        "/api/flashcards",
        json={"folderId": first["id"], "frontText": "q", "backText": "a"},
        headers=alice.headers,
    )

    folders = client.get("/api/folders", headers=alice.headers).json()["folders"]
    assert [f["id"] for f in folders] == [second["id"], first["id"]]
    assert [f["flashcardCount"] for f in folders] == [0, 1]


def test_rename_folder(api_client, make_user) -> None:
    client, _ = api_client
    user = make_user()
    folder = _create_folder(client, user, "Old")
    resp = client.put(f"/api/folders/{folder['id']}", json={"name": "New"}, headers=user.headers)
    assert resp.status_code == 200
    assert resp.json()["folder"]["name"] == "New"


def test_rename_unknown_folder_is_404(api_client, make_user) -> None:
    client, _ = api_client
    user = make_user()
    resp = client.put("/api/folders/999999", json={"name": "New"}, headers=user.headers)
    assert resp.status_code == 404


def test_other_users_folder_is_403(api_client, make_user) -> None:
    client, _ = api_client
    owner, intruder = make_user(), make_user()
    folder = _create_folder(client, owner, "Private")

    rename = client.put(f"/api/folders/{folder['id']}", json={"name": "Mine now"}, headers=intruder.headers)
    delete = client.delete(f"/api/folders/{folder['id']}", headers=intruder.headers)
    assert rename.status_code == 403
    assert delete.status_code == 403

    folders = client.get("/api/folders", headers=owner.headers).json()["folders"]
    assert [f["name"] for f in folders] == ["Private"]


def test_delete_folder_removes_its_flashcards(api_client, make_user) -> None:
    client, _ = api_client
    user = make_user()
    doomed = _create_folder(client, user, "Doomed")
    kept = _create_folder(client, user, "Kept")
    for folder in (doomed, doomed, kept):
        client.post(
            "/api/flashcards",
            json={"folderId": folder["id"], "frontText": "q", "backText": "a"},
            headers=user.headers,
        )

    resp = client.delete(f"/api/folders/{doomed['id']}", headers=user.headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Folder deleted successfully"}

    cards = client.get("/api/flashcards", headers=user.headers).json()["flashcards"]
    assert [c["folderId"] for c in cards] == [kept["id"]]
    in_doomed = client.get("/api/flashcards", params={"folder_id": doomed["id"]}, headers=user.headers)
    assert in_doomed.json()["flashcards"] == []
    again = client.delete(f"/api/folders/{doomed['id']}", headers=user.headers)
    assert again.status_code == 404


def test_out_of_range_folder_id_is_404(api_client, make_user) -> None:
    """Ids beyond the 64-bit range cannot exist; they must not reach SQLite."""
    client, _ = api_client
    user = make_user()
    huge = "99999999999999999999"
    rename = client.put(f"/api/folders/{huge}", json={"name": "x"}, headers=user.headers)
    delete = client.delete(f"/api/folders/{huge}", headers=user.headers)
    assert (rename.status_code, delete.status_code) == (404, 404)
