"""Unit tests for PropertyService."""

import pytest

from fnb_cost.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from fnb_cost.core.models.domain import PropertyType
from fnb_cost.core.models.io.properties import PropertyCreate, PropertyUpdate
from fnb_cost.server.services.properties import PropertyService


@pytest.fixture
def properties(make_service):
    def _make(user):
        return make_service(PropertyService, user)

    return _make


class TestListing:
    @pytest.mark.asyncio
    async def test_super_admin_sees_all(self, properties, world):
        listed = await properties(world.admin).list_properties()
        assert {p.property_code for p in listed} == {"HH01", "CB01"}

    @pytest.mark.asyncio
    async def test_scoped_to_accessible(self, properties, world):
        assert [p.property_code for p in await properties(world.clerk).list_properties()] == ["HH01"]
        assert await properties(world.outsider).list_properties() == []

    @pytest.mark.asyncio
    async def test_filters(self, properties, world):
        service = properties(world.admin)
        assert [p.name for p in await service.list_properties(property_type=PropertyType.hotel)] == ["Harbour Hotel"]
        assert [p.name for p in await service.list_properties(search="bistro")] == ["Corner Bistro"]
        assert [p.name for p in await service.list_properties(owner_id=world.owner.id)] == ["Harbour Hotel"]

    @pytest.mark.asyncio
    async def test_accessible_properties_skips_inactive(self, properties, repos, world):
        world.hotel.is_active = False
        await repos.properties.update(world.hotel)
        assert await properties(world.clerk).accessible_properties() == []

    @pytest.mark.asyncio
    async def test_get_property(self, properties, world):
        assert (await properties(world.manager).get_property(world.hotel.id)).name == "Harbour Hotel"
        with pytest.raises(PermissionDeniedError):
            await properties(world.manager).get_property(world.bistro.id)
        with pytest.raises(NotFoundError):
            await properties(world.admin).get_property(999)


class TestCreate:
    @pytest.mark.asyncio
    async def test_caller_becomes_owner_with_owner_grant(self, properties, repos, world):
        created = await properties(world.owner).create_property(
            PropertyCreate(name="Seaside Resort", property_code="SR01", property_type=PropertyType.resort)
        )

        assert created.owner_id == world.owner.id
        grant = await repos.property_access.get_grant(world.owner.id, created.id)
        assert grant.access_level == "owner"
        logs = await repos.audit_logs.list(filters={"resource": "property"})
        assert logs[0].action == "CREATE"
        assert logs[0].property_id == created.id

    @pytest.mark.asyncio
    async def test_duplicate_code(self, properties, world):
        with pytest.raises(ConflictError):
            await properties(world.admin).create_property(PropertyCreate(name="Copy", property_code="HH01"))

    @pytest.mark.asyncio
    async def test_inactive_owner(self, properties, repos, world):
        world.outsider.is_active = False
        await repos.users.update(world.outsider)
        with pytest.raises(ValidationFailedError, match="inactive"):
            await properties(world.admin).create_property(
                PropertyCreate(name="New", property_code="NW01", owner_id=world.outsider.id)
            )

    @pytest.mark.asyncio
    async def test_requires_permission(self, properties, world):
        with pytest.raises(PermissionDeniedError):
            await properties(world.manager).create_property(PropertyCreate(name="New", property_code="NW01"))


class TestUpdate:
    @pytest.mark.asyncio
    async def test_owner_updates(self, properties, repos, world):
        updated = await properties(world.owner).update_property(
            world.hotel.id, PropertyUpdate(city="Lisbon", manager_id=world.manager.id)
        )

        assert updated.city == "Lisbon"
        assert updated.manager_id == world.manager.id
        logs = await repos.audit_logs.list(filters={"resource": "property", "action": "UPDATE"})
        assert logs[0].details["changes"]["city"] == {"from": None, "to": "Lisbon"}

    @pytest.mark.asyncio
    async def test_clear_optional_field(self, properties, world):
        service = properties(world.owner)
        await service.update_property(world.hotel.id, PropertyUpdate(city="Lisbon"))
        updated = await service.update_property(world.hotel.id, PropertyUpdate(city=None, name=None))

        assert updated.city is None
        assert updated.name == "Harbour Hotel"

    @pytest.mark.asyncio
    async def test_code_conflict(self, properties, world):
        with pytest.raises(ConflictError):
            await properties(world.admin).update_property(world.hotel.id, PropertyUpdate(property_code="CB01"))

    @pytest.mark.asyncio
    async def test_manager_cannot_update(self, properties, world):
        with pytest.raises(PermissionDeniedError):
            await properties(world.manager).update_property(world.hotel.id, PropertyUpdate(city="Porto"))


class TestDelete:
    @pytest.mark.asyncio
    async def test_refuses_with_outlets(self, properties, world):
        with pytest.raises(ConflictError, match="outlets"):
            await properties(world.admin).delete_property(world.hotel.id)

    @pytest.mark.asyncio
    async def test_delete_removes_grants(self, properties, repos, world):
        empty = await properties(world.admin).create_property(PropertyCreate(name="Empty", property_code="EM01"))
        await properties(world.admin).delete_property(empty.id)

        assert await repos.properties.get_by_id(empty.id) is None
        assert await repos.property_access.list_for_property(empty.id) == []

    @pytest.mark.asyncio
    async def test_super_admin_only(self, properties, repos, world):
        await repos.outlets.delete(world.cafe.id)
        with pytest.raises(PermissionDeniedError):
            await properties(world.owner).delete_property(world.bistro.id)


class TestTransferOwnership:
    @pytest.mark.asyncio
    async def test_owner_transfers(self, properties, repos, world):
        moved = await properties(world.owner).transfer_ownership(world.hotel.id, world.manager.id)

        assert moved.owner_id == world.manager.id
        grant = await repos.property_access.get_grant(world.manager.id, world.hotel.id)
        assert grant.access_level == "owner"
        logs = await repos.audit_logs.list(filters={"action": "TRANSFER_OWNERSHIP"})
        assert logs[0].details["changes"]["owner_id"] == {"from": world.owner.id, "to": world.manager.id}

    @pytest.mark.asyncio
    async def test_non_owner_without_permission(self, properties, world):
        with pytest.raises(PermissionDeniedError, match="Only the owner"):
            await properties(world.manager).transfer_ownership(world.hotel.id, world.clerk.id)

    @pytest.mark.asyncio
    async def test_super_admin_transfers(self, properties, world):
        moved = await properties(world.admin).transfer_ownership(world.bistro.id, world.owner.id)
        assert moved.owner_id == world.owner.id

