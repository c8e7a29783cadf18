from test.settings import test_settings

import pytest
from httpx import AsyncClient

from fnb_cost.core.database.repositories import AuditLogQuery
from fnb_cost.server.core.config import settings

pytestmark = pytest.mark.asyncio


async def test_login_issues_token(client: AsyncClient, world):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "clerk@example.com", "password": test_settings.users.password},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == settings.auth.jwt_expiry_minutes * 60
    assert data["user"]["id"] == world.clerk.id
    assert data["user"]["role"] == "supervisor"
    assert data["user"]["last_login_at"] is not None
    assert "password_hash" not in data["user"]

    response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert response.status_code == 200
    assert response.json()["email"] == "clerk@example.com"


async def test_login_wrong_password(client: AsyncClient, world):
    response = await client.post("/api/v1/auth/login", json={"email": "clerk@example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}


async def test_login_rate_limited_per_client(client: AsyncClient, world, repos):
    limit = settings.security.login_rate_limit
    headers = {"X-Forwarded-For": "203.0.113.50"}
    for _ in range(limit):
        response = await client.post(
            "/api/v1/auth/login", json={"email": "clerk@example.com", "password": "nope-nope"}, headers=headers
        )
        assert response.status_code == 401

    # even the right password is refused once the window is full
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "clerk@example.com", "password": test_settings.users.password},
        headers=headers,
    )
    assert response.status_code == 429
    assert int(response.headers["retry-after"]) > 0
    assert response.json()["detail"] == "Too many attempts, try again later"

    rows, total = await repos.audit_logs.search(AuditLogQuery(action="RATE_LIMIT_EXCEEDED"), limit=5)
    assert total == 1
    log, _ = rows[0]
    assert log.ip_address == "203.0.113.50"
    assert log.details == {"scope": "login", "limit": limit, "window_seconds": settings.security.login_rate_window_seconds}

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "clerk@example.com", "password": test_settings.users.password},
        headers={"X-Forwarded-For": "203.0.113.51"},
    )
    assert response.status_code == 200


async def test_password_reset_rate_limited(client: AsyncClient, world, auth):
    headers = auth(world.admin)
    for _ in range(settings.security.sensitive_rate_limit):
        response = await client.post(
            f"/api/v1/users/{world.clerk.id}/reset-password", json={"new_password": "brand-new-pass"}, headers=headers
        )
        assert response.status_code == 204

    response = await client.post(
        f"/api/v1/users/{world.clerk.id}/reset-password", json={"new_password": "brand-new-pass"}, headers=headers
    )
    assert response.status_code == 429


async def test_owner_cannot_reset_password(client: AsyncClient, world, auth):
    response = await client.post(
        f"/api/v1/users/{world.admin.id}/reset-password",
        json={"new_password": "taken-over-pw"},
        headers=auth(world.owner),
    )
    assert response.status_code == 403


async def test_get_me(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users/me", headers=auth(world.manager))
    assert response.status_code == 200
    assert response.json()["email"] == "manager@example.com"


async def test_list_users_sorted_by_name(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users", headers=auth(world.admin))
    assert response.status_code == 200
    names = [u["name"] for u in response.json()]
    assert names == ["Ada Admin", "Cam Clerk", "Mika Manager", "Olu Owner", "Oz Outsider"]


async def test_list_users_filters(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users", params={"role": "supervisor"}, headers=auth(world.admin))
    assert [u["id"] for u in response.json()] == [world.clerk.id]

    response = await client.get("/api/v1/users", params={"search": "mika"}, headers=auth(world.admin))
    assert [u["id"] for u in response.json()] == [world.manager.id]

    response = await client.get("/api/v1/users/by-role/property_owner", headers=auth(world.admin))
    assert [u["id"] for u in response.json()] == [world.owner.id]


async def test_list_users_requires_permission(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users", headers=auth(world.clerk))
    assert response.status_code == 403


async def test_user_reads_self_without_permission(client: AsyncClient, world, auth):
    response = await client.get(f"/api/v1/users/{world.clerk.id}", headers=auth(world.clerk))
    assert response.status_code == 200

    response = await client.get(f"/api/v1/users/{world.owner.id}", headers=auth(world.clerk))
    assert response.status_code == 403


async def test_user_statistics(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users/statistics", headers=auth(world.admin))
    assert response.status_code == 200
    data = response.json()
    assert data["total_users"] == 5
    assert data["active_users"] == 5
    assert data["inactive_users"] == 0
    assert data["users_by_role"]["super_admin"] == 1


async def test_create_update_delete_user(client: AsyncClient, world, auth):
    headers = auth(world.admin)
    response = await client.post(
        "/api/v1/users",
        json={"email": "new@example.com", "name": "Nia New", "password": "long-enough-pw", "role": "supervisor"},
        headers=headers,
    )
    assert response.status_code == 201
    user_id = response.json()["id"]

    response = await client.patch(f"/api/v1/users/{user_id}", json={"department": "Kitchen"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["department"] == "Kitchen"

    response = await client.post(
        f"/api/v1/users/{user_id}/reset-password", json={"new_password": "another-long-pw"}, headers=headers
    )
    assert response.status_code == 204

    response = await client.post(
        "/api/v1/auth/login", json={"email": "new@example.com", "password": "another-long-pw"}
    )
    assert response.status_code == 200

    response = await client.delete(f"/api/v1/users/{user_id}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/users/{user_id}", headers=headers)
    assert response.status_code == 404


async def test_create_user_duplicate_email(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/users", json={"email": "clerk@example.com", "name": "Copy"}, headers=auth(world.admin)
    )
    assert response.status_code == 409


async def test_create_user_short_password(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/users", json={"email": "x@example.com", "password": "short"}, headers=auth(world.admin)
    )
    assert response.status_code == 422


async def test_owner_cannot_assign_roles(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/users",
        json={"email": "boss@example.com", "role": "super_admin"},
        headers=auth(world.owner),
    )
    assert response.status_code == 403


async def test_lock_blocks_requests(client: AsyncClient, world, auth):
    response = await client.post(f"/api/v1/users/{world.clerk.id}/lock", headers=auth(world.admin))
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await client.get("/api/v1/users/me", headers=auth(world.clerk))
    assert response.status_code == 403

    response = await client.post(f"/api/v1/users/{world.clerk.id}/unlock", headers=auth(world.admin))
    assert response.json()["is_active"] is True


async def test_cannot_lock_self(client: AsyncClient, world, auth):
    response = await client.post(f"/api/v1/users/{world.admin.id}/lock", headers=auth(world.admin))
    assert response.status_code == 400
    assert response.json()["detail"] == "Users cannot lock their own account"
