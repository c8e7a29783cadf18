import csv
import io

import pytest
from httpx import AsyncClient

from fnb_cost.core.database.base import utc_now

pytestmark = pytest.mark.asyncio


async def make_outlet(client, world, auth, code="POOL"):
    response = await client.post(
        "/api/v1/outlets",
        json={"name": f"{code.title()} Outlet", "outlet_code": code, "property_id": world.hotel.id},
        headers={**auth(world.owner), "X-Forwarded-For": "203.0.113.40", "User-Agent": "till/2.1"},
    )
    assert response.status_code == 201
    return response.json()


async def test_list_audit_logs(client: AsyncClient, world, auth):
    outlet = await make_outlet(client, world, auth)

    response = await client.get("/api/v1/audit-logs", headers=auth(world.admin))
    assert response.status_code == 200
    page = response.json()
    assert page["total"] == 1
    assert page["page"] == 1
    assert page["total_pages"] == 1
    log = page["logs"][0]
    assert log["action"] == "CREATE"
    assert log["resource"] == "outlet"
    assert log["resource_id"] == str(outlet["id"])
    assert log["ip_address"] == "203.0.113.40"
    assert log["user_agent"] == "till/2.1"
    assert log["user"]["email"] == "owner@example.com"


async def test_list_filters(client: AsyncClient, world, auth):
    await make_outlet(client, world, auth, "POOL")
    await make_outlet(client, world, auth, "DELI")

    response = await client.get(
        "/api/v1/audit-logs", params={"search_term": "olu", "limit": 1}, headers=auth(world.admin)
    )
    page = response.json()
    assert page["total"] == 2
    assert page["total_pages"] == 2
    assert len(page["logs"]) == 1

    response = await client.get(
        "/api/v1/audit-logs", params={"exclude_actions": ["CREATE"]}, headers=auth(world.admin)
    )
    assert response.json()["total"] == 0


async def test_audit_logs_restricted(client: AsyncClient, world, auth):
    for user in (world.owner, world.manager, world.clerk):
        response = await client.get("/api/v1/audit-logs", headers=auth(user))
        assert response.status_code == 403


async def test_recent_and_stats(client: AsyncClient, world, auth):
    await make_outlet(client, world, auth)

    response = await client.get("/api/v1/audit-logs/recent", params={"limit": 5}, headers=auth(world.admin))
    assert [log["action"] for log in response.json()] == ["CREATE"]

    response = await client.get("/api/v1/audit-logs/stats", headers=auth(world.admin))
    stats = response.json()
    assert stats["total_logs"] == 1
    assert stats["today_logs"] == 1
    assert stats["unique_users"] == 1
    assert stats["top_actions"] == [{"action": "CREATE", "count": 1}]


async def test_export_csv(client: AsyncClient, world, auth):
    await make_outlet(client, world, auth)

    response = await client.get("/api/v1/audit-logs/export", headers=auth(world.admin))
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"].startswith('attachment; filename="audit-logs-')

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][:4] == ["Timestamp", "User", "User Email", "Action"]
    assert rows[1][1] == "Olu Owner"
    assert rows[1][3] == "CREATE"

    # the export is itself audited
    response = await client.get("/api/v1/audit-logs", params={"action": "EXPORT"}, headers=auth(world.admin))
    assert response.json()["total"] == 1


async def test_export_super_admin_only(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/audit-logs/export", headers=auth(world.owner))
    assert response.status_code == 403


async def test_cleanup(client: AsyncClient, world, auth):
    await make_outlet(client, world, auth)

    response = await client.delete("/api/v1/audit-logs/cleanup", params={"retention_days": 30}, headers=auth(world.admin))
    assert response.status_code == 200
    assert response.json() == {"deleted_count": 0}

    response = await client.delete("/api/v1/audit-logs/cleanup", headers=auth(world.manager))
    assert response.status_code == 403


async def test_user_activity_report(client: AsyncClient, world, auth):
    await make_outlet(client, world, auth)
    today = utc_now().date().isoformat()

    response = await client.get(
        "/api/v1/audit-logs/user-activity", params={"start": today, "end": today}, headers=auth(world.admin)
    )
    assert response.status_code == 200
    report = response.json()
    assert report["summary"]["total_actions"] == 1
    [owner] = report["users"]
    assert owner["user_email"] == "owner@example.com"
    assert owner["unique_ips"] == 1
    assert owner["property_activity"][0]["property_name"] == "Harbour Hotel"
    assert report["resources"][0]["resource"] == "outlet"


async def test_user_activity_report_admins_only(client: AsyncClient, world, auth):
    response = await client.get(
        "/api/v1/audit-logs/user-activity",
        params={"start": "2025-03-10", "end": "2025-03-11"},
        headers=auth(world.owner),
    )
    assert response.status_code == 403
