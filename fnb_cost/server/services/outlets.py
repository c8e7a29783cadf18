"""
Outlet administration service.

Outlets are always reached through their property: every read and write
checks that the caller can access the owning property.
"""

from __future__ import annotations

from typing import List, Optional

from fnb_cost.core.database.entities import Outlet, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import ConflictError, NotFoundError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.outlets import OutletCreate, OutletRead, OutletUpdate

from .access import AccessControl
from .audit import AuditService, snapshot

logger = get_logger(__name__)

RESOURCE = "outlet"


class OutletService:
    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def get_accessible_outlet(self, outlet_id: int) -> Outlet:
        """Load an outlet the caller may see, or raise NotFoundError/PermissionDeniedError."""
        outlet = await self.repos.outlets.get_by_id(outlet_id)
        if outlet is None:
            raise NotFoundError("Outlet", outlet_id)
        await self.access.require_property(outlet.property_id)
        return outlet

    async def list_outlets(self, *, property_id: Optional[int] = None, active_only: bool = False) -> List[OutletRead]:
        """Outlets visible to the caller, optionally for one property."""
        if property_id is not None:
            if await self.repos.properties.get_by_id(property_id) is None:
                raise NotFoundError("Property", property_id)
            await self.access.require_property(property_id)
            property_ids: Optional[List[int]] = [property_id]
        else:
            property_ids = await self.access.accessible_property_ids()
        outlets = await self.repos.outlets.list_for_properties(property_ids, active_only=active_only)
        return [OutletRead.model_validate(o) for o in outlets]

    async def get_outlet(self, outlet_id: int) -> OutletRead:
        return OutletRead.model_validate(await self.get_accessible_outlet(outlet_id))

    async def create_outlet(self, data: OutletCreate) -> OutletRead:
        if await self.repos.properties.get_by_id(data.property_id) is None:
            raise NotFoundError("Property", data.property_id)
        await self.access.require_property_permission(data.property_id, "outlets.create")
        if await self.repos.outlets.get_by_code(data.property_id, data.outlet_code):
            raise ConflictError(f"Outlet code {data.outlet_code} already exists in property {data.property_id}")

        outlet = await self.repos.outlets.create(Outlet(**data.model_dump()))
        logger.info(f"User {self.user.id} created outlet {outlet.id} in property {outlet.property_id}")
        await self.audit.log_data_change("CREATE", RESOURCE, outlet.id, after=outlet, property_id=outlet.property_id)
        return OutletRead.model_validate(outlet)

    async def update_outlet(self, outlet_id: int, data: OutletUpdate) -> OutletRead:
        outlet = await self.get_accessible_outlet(outlet_id)
        await self.access.require_property_permission(outlet.property_id, "outlets.update")
        changes = data.model_dump(exclude_unset=True)
        code = changes.get("outlet_code")
        if code and code != outlet.outlet_code and await self.repos.outlets.get_by_code(outlet.property_id, code):
            raise ConflictError(f"Outlet code {code} already exists in property {outlet.property_id}")

        before = snapshot(outlet)
        for key, value in changes.items():
            if value is None and key in ("name", "outlet_code", "is_active"):
                continue
            setattr(outlet, key, value)
        outlet = await self.repos.outlets.update(outlet)
        await self.audit.log_data_change(
            "UPDATE", RESOURCE, outlet.id, before=before, after=outlet, property_id=outlet.property_id
        )
        return OutletRead.model_validate(outlet)

    async def delete_outlet(self, outlet_id: int) -> None:
        outlet = await self.get_accessible_outlet(outlet_id)
        await self.access.require_property_permission(outlet.property_id, "outlets.delete")
        if await self.repos.food_costs.list_by_outlet(outlet_id) or await self.repos.beverage_costs.list_by_outlet(
            outlet_id
        ):
            raise ConflictError(f"Outlet {outlet_id} has cost entries; deactivate it instead")
        before = snapshot(outlet)
        await self.repos.outlets.delete(outlet_id)
        logger.info(f"User {self.user.id} deleted outlet {outlet_id}")
        await self.audit.log_data_change("DELETE", RESOURCE, outlet_id, before=before, property_id=outlet.property_id)
