"""Tests for user account and role endpoints."""

from __future__ import annotations

import pytest

USER = {
    "username": "jdoe",
    "email": "jdoe@example.com",
    "password": "s3cret-pass",
    "first_name": "John",
    "last_name": "Doe",
}


@pytest.fixture
async def user(client):
    resp = await client.post("/api/users", json=USER)
    assert resp.status_code == 201
    return resp.json()


async def _role_id(client, name: str) -> int:
    resp = await client.get("/api/roles")
    return next(r["role_id"] for r in resp.json() if r["role_name"] == name)


class TestUsersAPI:
    async def test_create_hides_password(self, user):
        assert user["username"] == "jdoe"
        assert user["is_active"] is True
        assert "password" not in user
        assert "password_hash" not in user

    async def test_duplicate_username_conflicts(self, client, user):
        resp = await client.post("/api/users", json={**USER, "email": "other@example.com"})
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Username already exists"

    async def test_duplicate_email_conflicts(self, client, user):
        resp = await client.post("/api/users", json={**USER, "username": "other"})
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Email already exists"

    async def test_short_password_rejected(self, client):
        resp = await client.post("/api/users", json={**USER, "password": "abc"})
        assert resp.status_code == 422

    async def test_lookups(self, client, user):
        resp = await client.get("/api/users/username/jdoe")
        assert resp.json()["user_id"] == user["user_id"]

        resp = await client.get("/api/users/email/jdoe@example.com")
        assert resp.json()["user_id"] == user["user_id"]

        assert (await client.get("/api/users/username/ghost")).status_code == 404
        assert (await client.get("/api/users/999")).status_code == 404

    async def test_search(self, client, user):
        await client.post(
            "/api/users",
            json={**USER, "username": "asmith", "email": "asmith@example.com", "last_name": "Smith"},
        )
        resp = await client.get("/api/users/search", params={"q": "smith"})
        assert [u["username"] for u in resp.json()["data"]] == ["asmith"]

        resp = await client.get("/api/users")
        assert resp.json()["total"] == 2

    async def test_update_password_allows_login(self, client, user):
        resp = await client.put(f"/api/users/{user['user_id']}", json={"password": "n3w-password"})
        assert resp.status_code == 200

        resp = await client.post("/api/auth/login", json={"email": USER["email"], "password": "n3w-password"})
        assert resp.status_code == 200

    async def test_activation(self, client, user):
        resp = await client.put(f"/api/users/{user['user_id']}/deactivate")
        assert resp.json()["is_active"] is False

        resp = await client.get("/api/users/status/inactive")
        assert [u["username"] for u in resp.json()] == ["jdoe"]

        resp = await client.put(f"/api/users/{user['user_id']}/activate")
        assert resp.json()["is_active"] is True
        assert (await client.get("/api/users/status/inactive")).json() == []

    async def test_unknown_status_rejected(self, client):
        resp = await client.get("/api/users/status/banned")
        assert resp.status_code == 422

    async def test_soft_delete_deactivates(self, client, user):
        resp = await client.delete(f"/api/users/{user['user_id']}")
        assert resp.status_code == 204

        resp = await client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["is_active"] is False

    async def test_hard_delete_removes(self, client, user):
        role_id = await _role_id(client, "staff")
        await client.post(f"/api/users/{user['user_id']}/roles", json={"role_id": role_id})

        resp = await client.delete(f"/api/users/{user['user_id']}", params={"hard": True})
        assert resp.status_code == 204
        assert (await client.get(f"/api/users/{user['user_id']}")).status_code == 404


class TestRolesAPI:
    async def test_seeded_roles(self, client):
        resp = await client.get("/api/roles")
        roles = {r["role_name"]: r for r in resp.json()}
        assert set(roles) == {"admin", "staff", "passenger"}
        assert roles["admin"]["permissions"] == {"*": ["create", "read", "update", "delete"]}

    async def test_assign_and_remove(self, client, user):
        role_id = await _role_id(client, "staff")
        url = f"/api/users/{user['user_id']}/roles"

        resp = await client.post(url, json={"role_id": role_id})
        assert resp.json() == {"assigned": True}

        resp = await client.post(url, json={"role_id": role_id})
        assert resp.json() == {"assigned": False}

        resp = await client.get(url)
        assert [r["role_name"] for r in resp.json()] == ["staff"]

        resp = await client.get("/api/users/with-roles")
        assert [r["role_name"] for r in resp.json()[0]["roles"]] == ["staff"]

        resp = await client.delete(f"{url}/{role_id}")
        assert resp.status_code == 204
        assert (await client.get(url)).json() == []

    async def test_remove_missing_assignment(self, client, user):
        resp = await client.delete(f"/api/users/{user['user_id']}/roles/1")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Role assignment not found"

    async def test_assign_unknown_role(self, client, user):
        resp = await client.post(f"/api/users/{user['user_id']}/roles", json={"role_id": 99})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Role not found"

    async def test_roles_of_unknown_user(self, client):
        resp = await client.get("/api/users/999/roles")
        assert resp.status_code == 404
