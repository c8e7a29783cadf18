"""Unit tests for AccessControl: role permissions, property grants and ownership."""

from datetime import timedelta

import pytest

from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import PropertyAccess
from fnb_cost.core.errors import PermissionDeniedError
from fnb_cost.server.services.access import AccessControl


class TestGlobalPermissions:
    def test_super_admin_has_everything(self, repos, world):
        access = AccessControl(repos, world.admin)
        assert access.is_super_admin is True
        assert access.has("system.manage") is True
        access.require_super_admin()

    def test_role_permission(self, repos, world):
        access = AccessControl(repos, world.clerk)
        assert access.has("financial.food_costs.create") is True
        assert access.has("financial.food_costs.delete") is False

    def test_require_raises_permission_denied(self, repos, world):
        with pytest.raises(PermissionDeniedError, match="users.create"):
            AccessControl(repos, world.manager).require("users.create")

    def test_explicit_extra_permissions(self, repos, world):
        world.outsider.permissions = ["reports.export"]
        assert AccessControl(repos, world.outsider).has("reports.export") is True

    def test_require_super_admin(self, repos, world):
        with pytest.raises(PermissionDeniedError):
            AccessControl(repos, world.owner).require_super_admin()

    def test_require_role(self, repos, world):
        from fnb_cost.core.models.domain import UserRole

        AccessControl(repos, world.manager).require_role(UserRole.property_manager, UserRole.super_admin)
        with pytest.raises(PermissionDeniedError):
            AccessControl(repos, world.clerk).require_role(UserRole.super_admin)


class TestPropertyAccess:
    @pytest.mark.asyncio
    async def test_super_admin_is_unrestricted(self, repos, world):
        access = AccessControl(repos, world.admin)
        assert await access.accessible_property_ids() is None
        assert await access.can_access_property(world.hotel.id) is True

    @pytest.mark.asyncio
    async def test_owner_reaches_owned_property_without_grant(self, repos, world):
        access = AccessControl(repos, world.owner)
        assert await access.accessible_property_ids() == [world.hotel.id]

    @pytest.mark.asyncio
    async def test_grant_gives_access(self, repos, world):
        access = AccessControl(repos, world.clerk)
        assert await access.accessible_property_ids() == [world.hotel.id]
        assert await access.can_access_property(world.bistro.id) is False

    @pytest.mark.asyncio
    async def test_managed_property_is_accessible(self, repos, world):
        world.bistro.manager_id = world.outsider.id
        await repos.properties.update(world.bistro)

        access = AccessControl(repos, world.outsider)
        assert await access.accessible_property_ids() == [world.bistro.id]

    @pytest.mark.asyncio
    async def test_expired_grant_is_ignored(self, repos, world):
        await repos.property_access.create(
            PropertyAccess(
                user_id=world.outsider.id,
                property_id=world.hotel.id,
                access_level="read_only",
                expires_at=utc_now() - timedelta(days=1),
            )
        )
        access = AccessControl(repos, world.outsider)
        assert await access.accessible_property_ids() == []
        with pytest.raises(PermissionDeniedError):
            await access.require_property(world.hotel.id)

    @pytest.mark.asyncio
    async def test_property_permission_by_role(self, repos, world):
        await AccessControl(repos, world.clerk).require_property_permission(
            world.hotel.id, "financial.food_costs.create"
        )

    @pytest.mark.asyncio
    async def test_property_permission_by_grant_level(self, repos, world):
        # Plain users gain write rights through a data_entry grant
        await repos.property_access.create(
            PropertyAccess(user_id=world.outsider.id, property_id=world.bistro.id, access_level="data_entry")
        )
        await AccessControl(repos, world.outsider).require_property_permission(
            world.bistro.id, "financial.food_costs.create"
        )

    @pytest.mark.asyncio
    async def test_property_permission_denied(self, repos, world):
        with pytest.raises(PermissionDeniedError, match="financial.food_costs.delete"):
            await AccessControl(repos, world.manager).require_property_permission(
                world.hotel.id, "financial.food_costs.delete"
            )

    @pytest.mark.asyncio
    async def test_property_permission_needs_property_access(self, repos, world):
        with pytest.raises(PermissionDeniedError, match="No access"):
            await AccessControl(repos, world.manager).require_property_permission(
                world.bistro.id, "financial.food_costs.read"
            )


class TestCanManageAccess:
    @pytest.mark.asyncio
    async def test_owner_and_managing_grant(self, repos, world):
        assert await AccessControl(repos, world.owner).can_manage_access(world.hotel.id) is True
        assert await AccessControl(repos, world.manager).can_manage_access(world.hotel.id) is True
        assert await AccessControl(repos, world.admin).can_manage_access(world.hotel.id) is True

    @pytest.mark.asyncio
    async def test_data_entry_cannot_manage(self, repos, world):
        assert await AccessControl(repos, world.clerk).can_manage_access(world.hotel.id) is False
        assert await AccessControl(repos, world.outsider).can_manage_access(world.hotel.id) is False
