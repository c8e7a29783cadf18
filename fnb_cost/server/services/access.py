"""
Permission and property access checks for the calling user.

A super admin passes every check. Everyone else needs the permission through
their role (or explicit extras) and, for property-scoped data, an unexpired
grant on the property or ownership/management of it.
"""

from __future__ import annotations

from typing import List, Optional

from fnb_cost.core.database.entities import PropertyAccess, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import PermissionDeniedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import (
    UserRole,
    has_permission,
    has_property_permission,
)
from fnb_cost.core.models.domain.enums import ACCESS_MANAGING_LEVELS, PropertyAccessLevel

logger = get_logger(__name__)


class AccessControl:
    """Access checks bound to one user and one request's repositories."""

    def __init__(self, repos: SqlRepoBundle, user: User) -> None:
        self.repos = repos
        self.user = user
        self._property_ids: Optional[List[int]] = None

    @property
    def is_super_admin(self) -> bool:
        return self.user.role == UserRole.super_admin.value

    def has(self, permission: str) -> bool:
        return has_permission(self.user.role, permission, self.user.permissions)

    def require(self, permission: str) -> None:
        """Raise PermissionDeniedError unless the user holds ``permission`` globally."""
        if not self.has(permission):
            logger.info(f"Permission {permission} denied for user {self.user.id}")
            raise PermissionDeniedError(f"Missing permission: {permission}")

    def require_super_admin(self) -> None:
        if not self.is_super_admin:
            raise PermissionDeniedError("Super admin access required")

    def require_role(self, *roles: UserRole) -> None:
        if self.user.role not in {role.value for role in roles}:
            raise PermissionDeniedError("Insufficient role for this operation")

    async def accessible_property_ids(self) -> Optional[List[int]]:
        """Properties the user can reach, or None for unrestricted access.

        Unexpired grants come first in grant order, followed by owned or
        managed properties without a grant.
        """
        if self.is_super_admin:
            return None
        if self._property_ids is None:
            ids = list(await self.repos.property_access.accessible_property_ids(self.user.id))
            for property_id in await self.repos.properties.ids_owned_or_managed_by(self.user.id):
                if property_id not in ids:
                    ids.append(property_id)
            self._property_ids = ids
        return self._property_ids

    async def can_access_property(self, property_id: int) -> bool:
        ids = await self.accessible_property_ids()
        return ids is None or property_id in ids

    async def require_property(self, property_id: int) -> None:
        if not await self.can_access_property(property_id):
            raise PermissionDeniedError(f"No access to property {property_id}")

    async def require_property_permission(self, property_id: int, permission: str) -> None:
        """Require access to the property and ``permission`` by role or by grant level."""
        await self.require_property(property_id)
        if self.has(permission):
            return
        grant = await self.repos.property_access.get_active_grant(self.user.id, property_id)
        if grant is not None and has_property_permission(grant.access_level, permission):
            return
        raise PermissionDeniedError(f"Missing permission: {permission}")

    async def can_manage_access(self, property_id: int) -> bool:
        """Whether the user may grant or revoke access on a property."""
        if self.is_super_admin:
            return True
        prop = await self.repos.properties.get_by_id(property_id)
        if prop is not None and self.user.id in (prop.owner_id, prop.manager_id):
            return True
        grant: Optional[PropertyAccess] = await self.repos.property_access.get_active_grant(
            self.user.id, property_id
        )
        return grant is not None and PropertyAccessLevel(grant.access_level) in ACCESS_MANAGING_LEVELS
