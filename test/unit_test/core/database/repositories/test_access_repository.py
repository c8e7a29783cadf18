"""Unit tests for the property access grant repository."""

from __future__ import annotations

from datetime import timedelta

from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import PropertyAccess


async def add_grant(repos, user, prop, level="read_only", expires_at=None):
    return await repos.property_access.create(
        PropertyAccess(user_id=user.id, property_id=prop.id, access_level=level, expires_at=expires_at)
    )


class TestPropertyAccessRepository:
    async def test_get_grant(self, repos, world):
        grant = await repos.property_access.get_grant(world.manager.id, world.hotel.id)

        assert grant.access_level == "management"
        assert await repos.property_access.get_grant(world.manager.id, world.bistro.id) is None

    async def test_expired_grant_is_not_active(self, repos, world):
        await add_grant(repos, world.outsider, world.bistro, expires_at=utc_now() - timedelta(hours=1))

        assert await repos.property_access.get_grant(world.outsider.id, world.bistro.id) is not None
        assert await repos.property_access.get_active_grant(world.outsider.id, world.bistro.id) is None

    async def test_future_expiry_is_active(self, repos, world):
        await add_grant(repos, world.outsider, world.bistro, expires_at=utc_now() + timedelta(days=1))
        assert await repos.property_access.get_active_grant(world.outsider.id, world.bistro.id) is not None

    async def test_list_for_user(self, repos, world):
        await add_grant(repos, world.manager, world.bistro, expires_at=utc_now() - timedelta(hours=1))

        active = await repos.property_access.list_for_user(world.manager.id)
        everything = await repos.property_access.list_for_user(world.manager.id, include_expired=True)

        assert [g.property_id for g in active] == [world.hotel.id]
        assert [g.property_id for g in everything] == [world.hotel.id, world.bistro.id]

    async def test_list_for_property(self, repos, world):
        grants = await repos.property_access.list_for_property(world.hotel.id)
        assert {g.user_id for g in grants} == {world.manager.id, world.clerk.id}

    async def test_accessible_property_ids(self, repos, world):
        await add_grant(repos, world.clerk, world.bistro)
        await add_grant(repos, world.manager, world.bistro, expires_at=utc_now() - timedelta(hours=1))

        assert await repos.property_access.accessible_property_ids(world.clerk.id) == [world.hotel.id, world.bistro.id]
        assert await repos.property_access.accessible_property_ids(world.manager.id) == [world.hotel.id]
        assert await repos.property_access.accessible_property_ids(world.outsider.id) == []

    async def test_delete_expired(self, repos, world):
        await add_grant(repos, world.outsider, world.bistro, expires_at=utc_now() - timedelta(hours=1))
        await add_grant(repos, world.outsider, world.hotel, expires_at=utc_now() + timedelta(days=1))

        assert await repos.property_access.delete_expired() == 1
        assert [g.property_id for g in await repos.property_access.list_for_user(world.outsider.id, include_expired=True)] == [
            world.hotel.id
        ]

    def test_is_expired(self):
        now = utc_now()
        assert PropertyAccess(user_id=1, property_id=1, access_level="read_only").is_expired(now) is False
        assert PropertyAccess(user_id=1, property_id=1, access_level="read_only", expires_at=now).is_expired(now) is True
