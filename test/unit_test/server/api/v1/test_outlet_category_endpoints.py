import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_list_outlets(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/outlets", headers=auth(world.admin))
    assert [o["outlet_code"] for o in response.json()] == ["CAFE", "BAR", "REST"]

    response = await client.get("/api/v1/outlets", headers=auth(world.clerk))
    assert [o["name"] for o in response.json()] == ["Lobby Bar", "Main Restaurant"]

    response = await client.get(
        "/api/v1/outlets", params={"property_id": world.bistro.id}, headers=auth(world.clerk)
    )
    assert response.status_code == 403


async def test_outlet_crud(client: AsyncClient, world, auth):
    headers = auth(world.owner)
    response = await client.post(
        "/api/v1/outlets",
        json={
            "name": "Pool Bar",
            "outlet_code": "POOL",
            "property_id": world.hotel.id,
            "default_budget_beverage_cost_pct": 22.5,
        },
        headers=headers,
    )
    assert response.status_code == 201
    outlet = response.json()
    assert outlet["default_budget_beverage_cost_pct"] == 22.5

    response = await client.patch(f"/api/v1/outlets/{outlet['id']}", json={"is_active": False}, headers=headers)
    assert response.json()["is_active"] is False

    response = await client.get(
        "/api/v1/outlets", params={"property_id": world.hotel.id, "active_only": True}, headers=headers
    )
    assert "POOL" not in [o["outlet_code"] for o in response.json()]

    response = await client.delete(f"/api/v1/outlets/{outlet['id']}", headers=headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/outlets/{outlet['id']}", headers=headers)
    assert response.status_code == 404


async def test_outlet_budget_pct_bounds(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/outlets",
        json={"name": "X", "outlet_code": "X", "property_id": world.hotel.id, "default_budget_food_cost_pct": 120},
        headers=auth(world.owner),
    )
    assert response.status_code == 422


async def test_outlet_duplicate_code(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/outlets",
        json={"name": "Other Bar", "outlet_code": "BAR", "property_id": world.hotel.id},
        headers=auth(world.owner),
    )
    assert response.status_code == 409


async def test_clerk_cannot_create_outlet(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/outlets",
        json={"name": "Deli", "outlet_code": "DELI", "property_id": world.hotel.id},
        headers=auth(world.clerk),
    )
    assert response.status_code == 403


async def test_list_categories(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/categories", headers=auth(world.clerk))
    assert response.status_code == 200
    assert len(response.json()) == 13

    response = await client.get("/api/v1/categories", params={"type": "Beverage"}, headers=auth(world.clerk))
    assert {c["name"] for c in response.json()} == {"Alcoholic", "Non-Alcoholic", "Hot", "Cold", "Specialty"}


async def test_category_crud(client: AsyncClient, world, auth):
    headers = auth(world.admin)
    response = await client.post(
        "/api/v1/categories", json={"name": "Bakery", "type": "Food", "description": "Bread"}, headers=headers
    )
    assert response.status_code == 201
    category_id = response.json()["id"]

    response = await client.patch(f"/api/v1/categories/{category_id}", json={"name": "Pastry"}, headers=headers)
    assert response.json()["name"] == "Pastry"

    response = await client.post("/api/v1/categories", json={"name": "Pastry", "type": "Food"}, headers=headers)
    assert response.status_code == 409

    response = await client.delete(f"/api/v1/categories/{category_id}", headers=headers)
    assert response.status_code == 204


async def test_category_writes_need_settings_permission(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/categories", json={"name": "Bakery", "type": "Food"}, headers=auth(world.owner)
    )
    assert response.status_code == 403


async def test_category_in_use(client: AsyncClient, world, auth, day):
    await client.post(
        "/api/v1/food-costs",
        json={
            "date": day.isoformat(),
            "outlet_id": world.restaurant.id,
            "details": [{"category_id": world.food["Dairy"].id, "cost": 40}],
        },
        headers=auth(world.clerk),
    )
    response = await client.delete(f"/api/v1/categories/{world.food['Dairy'].id}", headers=auth(world.admin))
    assert response.status_code == 409
