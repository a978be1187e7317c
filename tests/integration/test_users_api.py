"""
Integration tests for authentication and user management.
"""
from __future__ import annotations

TEST_PASSWORD = "correct-horse-battery"


def test_login_returns_token_usable_on_me(client, standard_user):
    response = client.post("/api/auth/login", json={"username": "alice", "password": TEST_PASSWORD})

    assert response.status_code == 200
    token = response.json()
    assert token["token_type"] == "bearer"
    assert token["expires_in"] > 0

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"
    assert me.json()["last_login_at"] is not None


def test_login_with_wrong_password(client, standard_user):
    response = client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"error": "unauthorized", "detail": "Incorrect username or password"}


def test_admin_user_crud(client, admin_headers):
    created = client.post(
        "/api/users",
        json={"username": "carol", "password": "longenough", "role": "user"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    user_id = created.json()["id"]

    duplicate = client.post(
        "/api/users",
        json={"username": "carol", "password": "longenough"},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409

    updated = client.put(f"/api/users/{user_id}", json={"role": "admin"}, headers=admin_headers)
    assert updated.json()["role"] == "admin"

    usernames = [user["username"] for user in client.get("/api/users", headers=admin_headers).json()]
    assert usernames == ["admin", "carol"]

    assert client.delete(f"/api/users/{user_id}", headers=admin_headers).status_code == 204
    assert client.put(f"/api/users/{user_id}", json={"role": "user"}, headers=admin_headers).status_code == 404


def test_admin_cannot_delete_own_account(client, admin_user, admin_headers):
    response = client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)

    assert response.status_code == 400


def test_user_management_is_admin_only(client, user_headers):
    assert client.get("/api/users", headers=user_headers).status_code == 403
    response = client.post(
        "/api/users",
        json={"username": "mallory", "password": "longenough"},
        headers=user_headers,
    )
    assert response.status_code == 403


def test_short_password_rejected(client, admin_headers):
    response = client.post("/api/users", json={"username": "dave", "password": "short"}, headers=admin_headers)

    assert response.status_code == 422


def test_token_for_deleted_user_is_rejected(client, admin_headers, other_user, other_headers):
    client.delete(f"/api/users/{other_user.id}", headers=admin_headers)

    assert client.get("/api/auth/me", headers=other_headers).status_code == 401
