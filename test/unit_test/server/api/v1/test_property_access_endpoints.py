from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_grant_replaces_existing(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/property-access",
        json={"user_id": world.clerk.id, "property_id": world.hotel.id, "access_level": "read_only"},
        headers=auth(world.owner),
    )
    assert response.status_code == 200
    assert response.json()["access_level"] == "read_only"
    assert response.json()["granted_by"] == world.owner.id

    response = await client.get(f"/api/v1/property-access/properties/{world.hotel.id}", headers=auth(world.owner))
    levels = {g["user_id"]: g["access_level"] for g in response.json()}
    assert levels == {world.manager.id: "management", world.clerk.id: "read_only"}


async def test_grant_in_past_rejected(client: AsyncClient, world, auth):
    yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    response = await client.post(
        "/api/v1/property-access",
        json={
            "user_id": world.outsider.id,
            "property_id": world.hotel.id,
            "access_level": "read_only",
            "expires_at": yesterday,
        },
        headers=auth(world.owner),
    )
    assert response.status_code == 400


async def test_grant_requires_access_management(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/property-access",
        json={"user_id": world.outsider.id, "property_id": world.hotel.id, "access_level": "read_only"},
        headers=auth(world.clerk),
    )
    assert response.status_code == 403


async def test_granted_user_sees_property(client: AsyncClient, world, auth):
    await client.post(
        "/api/v1/property-access",
        json={"user_id": world.outsider.id, "property_id": world.bistro.id, "access_level": "read_only"},
        headers=auth(world.admin),
    )
    response = await client.get("/api/v1/properties", headers=auth(world.outsider))
    assert [p["id"] for p in response.json()] == [world.bistro.id]


async def test_revoke(client: AsyncClient, world, auth):
    response = await client.delete(
        f"/api/v1/property-access/users/{world.clerk.id}/properties/{world.hotel.id}", headers=auth(world.manager)
    )
    assert response.status_code == 204

    response = await client.get("/api/v1/outlets", headers=auth(world.clerk))
    assert response.json() == []

    response = await client.delete(
        f"/api/v1/property-access/users/{world.clerk.id}/properties/{world.hotel.id}", headers=auth(world.manager)
    )
    assert response.status_code == 404


async def test_update_grant(client: AsyncClient, world, auth):
    response = await client.get(f"/api/v1/property-access/users/{world.clerk.id}", headers=auth(world.clerk))
    grant = response.json()[0]

    response = await client.patch(
        f"/api/v1/property-access/{grant['id']}", json={"access_level": "management"}, headers=auth(world.owner)
    )
    assert response.status_code == 200
    assert response.json()["access_level"] == "management"


async def test_list_other_users_grants_needs_permission(client: AsyncClient, world, auth):
    response = await client.get(f"/api/v1/property-access/users/{world.manager.id}", headers=auth(world.clerk))
    assert response.status_code == 403


async def test_bulk_grant(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/property-access/bulk",
        json={"user_ids": [world.outsider.id, 999], "property_id": world.hotel.id, "access_level": "read_only"},
        headers=auth(world.owner),
    )
    assert response.status_code == 200
    result = response.json()
    assert [g["user_id"] for g in result["granted"]] == [world.outsider.id]
    assert result["failed"] == [{"user_id": 999, "error": "User 999 not found"}]


async def test_bulk_grant_needs_users(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/property-access/bulk",
        json={"user_ids": [], "property_id": world.hotel.id, "access_level": "read_only"},
        headers=auth(world.owner),
    )
    assert response.status_code == 422


async def test_cleanup_super_admin_only(client: AsyncClient, world, auth):
    response = await client.delete("/api/v1/property-access/cleanup", headers=auth(world.admin))
    assert response.status_code == 200
    assert response.json() == {"deleted_count": 0}

    response = await client.delete("/api/v1/property-access/cleanup", headers=auth(world.owner))
    assert response.status_code == 403
