from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import create_post, create_user


def test_create_user_returns_201_with_location(client: TestClient) -> None:
    resp = client.post(
        "/api/users",
        json={"username": "alice_1", "email": "alice@example.com", "visibleName": "Alice"},
    )
    assert resp.status_code == 201
    assert resp.headers["location"] == "/api/users/1"
    assert resp.json() == {
        "id": 1,
        "username": "alice_1",
        "email": "alice@example.com",
        "visibleName": "Alice",
    }


def test_list_users_is_204_when_empty(client: TestClient) -> None:
    resp = client.get("/api/users")
    assert resp.status_code == 204
    assert resp.content == b""


def test_list_users_returns_created_users(client: TestClient) -> None:
    create_user(client, "alice")
    create_user(client, "bob")
    resp = client.get("/api/users")
    assert resp.status_code == 200
    assert [u["username"] for u in resp.json()] == ["alice", "bob"]


def test_list_users_with_category(client: TestClient) -> None:
    alice = create_user(client, "alice")
    create_user(client, "bob")
    create_post(client, alice["id"], categories=["Python"])

    resp = client.get("/api/users", params={"withCategory": "python"})
    assert resp.status_code == 200
    assert [u["username"] for u in resp.json()] == ["alice"]

    assert client.get("/api/users", params={"withCategory": "go"}).status_code == 204


def test_duplicate_email_is_409_with_error_body(client: TestClient) -> None:
    create_user(client, "alice", email="same@example.com")
    resp = client.post(
        "/api/users",
        json={"username": "other", "email": "same@example.com", "visibleName": "Other"},
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["status"] == 409
    assert body["error"] == "Conflict"
    assert body["message"] == "Email already exists"
    assert "timestamp" in body


def test_invalid_payload_is_400(client: TestClient) -> None:
    resp = client.post(
        "/api/users",
        json={"username": "a!", "email": "not-an-email", "visibleName": "A"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Bad Request"
    assert "username" in body["message"]
    assert "email" in body["message"]


def test_get_unknown_user_is_404(client: TestClient) -> None:
    resp = client.get("/api/users/42")
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


def test_non_numeric_id_is_400(client: TestClient) -> None:
    assert client.get("/api/users/abc").status_code == 400


def test_update_user(client: TestClient) -> None:
    alice = create_user(client, "alice")
    resp = client.put(
        f"/api/users/{alice['id']}",
        json={"username": "alice_b", "email": "alice@example.com", "visibleName": "Alice B"},
    )
    assert resp.status_code == 200
    assert resp.json()["username"] == "alice_b"
    assert client.get(f"/api/users/{alice['id']}").json()["visibleName"] == "Alice B"


def test_delete_user_removes_their_posts(client: TestClient) -> None:
    alice = create_user(client, "alice")
    post = create_post(client, alice["id"])

    assert client.delete(f"/api/users/{alice['id']}").status_code == 204
    assert client.get(f"/api/users/{alice['id']}").status_code == 404
    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert client.get("/api/posts").status_code == 204
