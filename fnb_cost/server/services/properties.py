"""
Property administration service.
"""

from __future__ import annotations

from typing import List, Optional

from fnb_cost.core.database.entities import Property, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import PropertyAccessLevel, PropertyType
from fnb_cost.core.models.io.properties import PropertyCreate, PropertyRead, PropertyUpdate

from .access import AccessControl
from .audit import AuditService, snapshot
from .property_access import upsert_grant

logger = get_logger(__name__)

RESOURCE = "property"


class PropertyService:
    """Property CRUD and ownership transfer for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _get(self, property_id: int) -> Property:
        prop = await self.repos.properties.get_by_id(property_id)
        if prop is None:
            raise NotFoundError("Property", property_id)
        return prop

    async def _require_active_user(self, user_id: int) -> User:
        target = await self.repos.users.get_by_id(user_id)
        if target is None:
            raise NotFoundError("User", user_id)
        if not target.is_active:
            raise ValidationFailedError(f"User {user_id} is inactive")
        return target

    async def _resolve_currency(self, currency_id: Optional[int]) -> Optional[int]:
        """An active currency id, or the default currency when none is given."""
        if currency_id is None:
            default = await self.repos.currencies.get_default()
            return default.id if default else None
        currency = await self.repos.currencies.get_by_id(currency_id)
        if currency is None:
            raise NotFoundError("Currency", currency_id)
        if not currency.is_active:
            raise ValidationFailedError(f"Currency {currency.code} is inactive")
        return currency.id

    async def list_properties(
        self,
        *,
        is_active: Optional[bool] = None,
        property_type: Optional[PropertyType] = None,
        owner_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> List[PropertyRead]:
        """Properties visible to the caller matching the filters."""
        properties = await self.repos.properties.search(
            property_ids=await self.access.accessible_property_ids(),
            is_active=is_active,
            property_type=property_type.value if property_type else None,
            owner_id=owner_id,
            search_term=search,
        )
        return [PropertyRead.model_validate(p) for p in properties]

    async def accessible_properties(self) -> List[PropertyRead]:
        """Active properties the caller can work with."""
        return await self.list_properties(is_active=True)

    async def get_property(self, property_id: int) -> PropertyRead:
        prop = await self._get(property_id)
        await self.access.require_property(property_id)
        return PropertyRead.model_validate(prop)

    async def create_property(self, data: PropertyCreate) -> PropertyRead:
        """Create a property and grant ``owner`` access to its owner.

        The caller becomes the owner when ``owner_id`` is omitted.
        """
        self.access.require("properties.create")
        if await self.repos.properties.get_by_code(data.property_code):
            raise ConflictError(f"Property code {data.property_code} already exists")
        owner_id = data.owner_id if data.owner_id is not None else self.user.id
        await self._require_active_user(owner_id)
        if data.manager_id is not None:
            await self._require_active_user(data.manager_id)

        values = data.model_dump()
        values.update(
            owner_id=owner_id,
            property_type=data.property_type.value,
            currency_id=await self._resolve_currency(data.currency_id),
        )
        prop = await self.repos.properties.create(Property(**values))
        await upsert_grant(
            self.repos,
            user_id=owner_id,
            property_id=prop.id,
            access_level=PropertyAccessLevel.owner,
            granted_by=self.user.id,
        )
        logger.info(f"User {self.user.id} created property {prop.id} ({prop.property_code})")
        await self.audit.log_data_change("CREATE", RESOURCE, prop.id, after=prop, property_id=prop.id)
        return PropertyRead.model_validate(prop)

    async def update_property(self, property_id: int, data: PropertyUpdate) -> PropertyRead:
        prop = await self._get(property_id)
        await self.access.require_property_permission(property_id, "properties.update")
        changes = data.model_dump(exclude_unset=True)

        code = changes.get("property_code")
        if code and code != prop.property_code and await self.repos.properties.get_by_code(code):
            raise ConflictError(f"Property code {code} already exists")
        if changes.get("manager_id") is not None:
            await self._require_active_user(changes["manager_id"])
        if changes.get("property_type") is not None:
            changes["property_type"] = changes["property_type"].value
        if changes.get("currency_id") is not None:
            await self._resolve_currency(changes["currency_id"])

        before = snapshot(prop)
        for key, value in changes.items():
            if value is None and key not in ("address", "city", "country", "manager_id"):
                continue
            setattr(prop, key, value)
        prop = await self.repos.properties.update(prop)
        await self.audit.log_data_change("UPDATE", RESOURCE, prop.id, before=before, after=prop, property_id=prop.id)
        return PropertyRead.model_validate(prop)

    async def delete_property(self, property_id: int) -> None:
        """Delete a property that has no outlets. Super admin only."""
        self.access.require_super_admin()
        prop = await self._get(property_id)
        if await self.repos.outlets.list_for_properties([property_id]):
            raise ConflictError(f"Property {property_id} still has outlets")
        before = snapshot(prop)
        for grant in await self.repos.property_access.list_for_property(property_id):
            await self.repos.property_access.delete(grant.id)
        await self.repos.properties.delete(property_id)
        logger.info(f"User {self.user.id} deleted property {property_id}")
        await self.audit.log_data_change("DELETE", RESOURCE, property_id, before=before)

    async def transfer_ownership(self, property_id: int, new_owner_id: int) -> PropertyRead:
        """Hand a property to a new owner and grant them ``owner`` access.

        Allowed for holders of ``properties.ownership.transfer`` and for the
        current owner.
        """
        prop = await self._get(property_id)
        if prop.owner_id != self.user.id:
            if not self.access.has("properties.ownership.transfer"):
                raise PermissionDeniedError("Only the owner can transfer this property")
            await self.access.require_property(property_id)
        await self._require_active_user(new_owner_id)

        before = snapshot(prop)
        prop.owner_id = new_owner_id
        prop = await self.repos.properties.update(prop)
        await upsert_grant(
            self.repos,
            user_id=new_owner_id,
            property_id=property_id,
            access_level=PropertyAccessLevel.owner,
            granted_by=self.user.id,
        )
        logger.info(f"Property {property_id} ownership moved from {before['owner_id']} to {new_owner_id}")
        await self.audit.log_data_change(
            "TRANSFER_OWNERSHIP", RESOURCE, property_id, before=before, after=prop, property_id=property_id
        )
        return PropertyRead.model_validate(prop)
