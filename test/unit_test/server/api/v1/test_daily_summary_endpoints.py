import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def save_summary(client, headers, property_id, day, **fields):
    payload = {"date": day, "property_id": property_id, **fields}
    return await client.post("/api/v1/daily-summaries", json=payload, headers=headers)


async def test_save_derives_actuals_from_entries(client: AsyncClient, world, auth):
    headers = auth(world.clerk)
    await client.post(
        "/api/v1/food-costs",
        json={
            "date": "2025-03-10",
            "outlet_id": world.restaurant.id,
            "details": [{"category_id": world.food["Proteins"].id, "cost": 350}],
        },
        headers=headers,
    )
    response = await save_summary(
        client,
        headers,
        world.hotel.id,
        "2025-03-10",
        actual_food_revenue=1000,
        budget_food_cost_pct=30,
        ent_food=20,
        co_food=10,
        other_food_adjustment=5,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["actual_food_cost"] == 325
    assert data["actual_food_cost_pct"] == 32.5
    assert data["food_variance_pct"] == 2.5
    assert data["actual_beverage_cost_pct"] == 0


async def test_save_twice_updates_same_row(client: AsyncClient, world, auth):
    headers = auth(world.manager)
    first = (await save_summary(client, headers, world.hotel.id, "2025-03-10", actual_food_revenue=800)).json()
    second = (await save_summary(client, headers, world.hotel.id, "2025-03-10", actual_food_revenue=900)).json()
    assert first["id"] == second["id"]
    assert second["actual_food_revenue"] == 900


async def test_super_admin_must_name_property(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/daily-summaries", json={"date": "2025-03-10", "actual_food_revenue": 1}, headers=auth(world.admin)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "property_id is required for super admins"


async def test_property_defaults_to_callers_first(client: AsyncClient, world, auth):
    response = await client.post(
        "/api/v1/daily-summaries", json={"date": "2025-03-10", "actual_food_revenue": 1}, headers=auth(world.clerk)
    )
    assert response.status_code == 200
    assert response.json()["property_id"] == world.hotel.id


async def test_get_by_date_and_id(client: AsyncClient, world, auth):
    headers = auth(world.manager)
    summary = (await save_summary(client, headers, world.hotel.id, "2025-03-10", actual_food_revenue=700)).json()

    response = await client.get(
        "/api/v1/daily-summaries/by-date/2025-03-10", params={"property_id": world.hotel.id}, headers=headers
    )
    assert response.json()["id"] == summary["id"]

    response = await client.get(f"/api/v1/daily-summaries/{summary['id']}", headers=headers)
    assert response.json()["actual_food_revenue"] == 700

    response = await client.get(
        "/api/v1/daily-summaries/by-date/2025-03-11", params={"property_id": world.hotel.id}, headers=headers
    )
    assert response.status_code == 404


async def test_list_and_paginate(client: AsyncClient, world, auth):
    headers = auth(world.manager)
    for day in ("2025-03-08", "2025-03-09", "2025-03-10"):
        await save_summary(client, headers, world.hotel.id, day, actual_food_revenue=100)

    response = await client.get(
        "/api/v1/daily-summaries", params={"start": "2025-03-09", "end": "2025-03-10"}, headers=headers
    )
    assert len(response.json()) == 2

    response = await client.get("/api/v1/daily-summaries/paginated", params={"limit": 2}, headers=headers)
    page = response.json()
    assert [s["date"] for s in page["items"]] == ["2025-03-10", "2025-03-09"]
    assert page["has_more"] is True
    assert page["total_count"] == 3

    response = await client.get(
        "/api/v1/daily-summaries/paginated", params={"limit": 2, "cursor": page["next_cursor"]}, headers=headers
    )
    page = response.json()
    assert [s["date"] for s in page["items"]] == ["2025-03-08"]
    assert page["has_more"] is False
    assert page["next_cursor"] is None


async def test_update_and_delete(client: AsyncClient, world, auth):
    summary = (
        await save_summary(client, auth(world.clerk), world.hotel.id, "2025-03-10", actual_food_revenue=100)
    ).json()

    response = await client.patch(
        f"/api/v1/daily-summaries/{summary['id']}", json={"note": "Wedding"}, headers=auth(world.clerk)
    )
    assert response.status_code == 403

    response = await client.patch(
        f"/api/v1/daily-summaries/{summary['id']}", json={"note": "Wedding"}, headers=auth(world.manager)
    )
    assert response.json()["note"] == "Wedding"

    response = await client.delete(f"/api/v1/daily-summaries/{summary['id']}", headers=auth(world.manager))
    assert response.status_code == 403

    response = await client.delete(f"/api/v1/daily-summaries/{summary['id']}", headers=auth(world.owner))
    assert response.status_code == 204


async def test_outsider_sees_nothing(client: AsyncClient, world, auth):
    await save_summary(client, auth(world.manager), world.hotel.id, "2025-03-10", actual_food_revenue=100)
    response = await client.get(
        "/api/v1/daily-summaries", params={"start": "2025-03-01", "end": "2025-03-31"}, headers=auth(world.outsider)
    )
    assert response.json() == []
