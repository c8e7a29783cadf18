"""
Property access grant service.

Grants are upserts on (user, property). Granting and revoking is open to
super admins, the property's owner or manager, and holders of an owner,
full_control or management grant on the property.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import PropertyAccess, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import FnbCostError, NotFoundError, PermissionDeniedError, ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import PropertyAccessLevel
from fnb_cost.core.models.io.property_access import (
    AccessCleanupResult,
    BulkAccessGrant,
    BulkGrantFailure,
    BulkGrantResult,
    PropertyAccessGrant,
    PropertyAccessRead,
    PropertyAccessUpdate,
)

from .access import AccessControl
from .audit import AuditService

logger = get_logger(__name__)


def as_naive_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; convert aware input to match."""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


async def upsert_grant(
    repos: SqlRepoBundle,
    *,
    user_id: int,
    property_id: int,
    access_level: PropertyAccessLevel,
    granted_by: Optional[int],
    expires_at: Optional[datetime] = None,
) -> PropertyAccess:
    """Create the grant or replace the level and expiry of an existing one."""
    grant = await repos.property_access.get_grant(user_id, property_id)
    if grant is None:
        return await repos.property_access.create(
            PropertyAccess(
                user_id=user_id,
                property_id=property_id,
                access_level=access_level.value,
                granted_by=granted_by,
                expires_at=expires_at,
            )
        )
    grant.access_level = access_level.value
    grant.granted_by = granted_by
    grant.granted_at = utc_now()
    grant.expires_at = expires_at
    return await repos.property_access.update(grant)


class PropertyAccessService:
    """Manage property grants on behalf of one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _require_manager(self, property_id: int) -> None:
        if await self.repos.properties.get_by_id(property_id) is None:
            raise NotFoundError("Property", property_id)
        if not await self.access.can_manage_access(property_id):
            raise PermissionDeniedError(f"Cannot manage access for property {property_id}")

    async def _require_user(self, user_id: int) -> User:
        target = await self.repos.users.get_by_id(user_id)
        if target is None:
            raise NotFoundError("User", user_id)
        return target

    async def grant(self, data: PropertyAccessGrant) -> PropertyAccessRead:
        """Grant (or replace) one user's access to one property."""
        await self._require_manager(data.property_id)
        await self._require_user(data.user_id)
        expires_at = as_naive_utc(data.expires_at)
        if expires_at is not None and expires_at <= utc_now():
            raise ValidationFailedError("expires_at must be in the future")

        previous = await self.repos.property_access.get_grant(data.user_id, data.property_id)
        previous_level = previous.access_level if previous else None
        grant = await upsert_grant(
            self.repos,
            user_id=data.user_id,
            property_id=data.property_id,
            access_level=data.access_level,
            granted_by=self.user.id,
            expires_at=expires_at,
        )
        logger.info(
            f"User {self.user.id} granted {data.access_level.value} on property {data.property_id} to user {data.user_id}"
        )
        await self.audit.log_property_access(
            "GRANT_PROPERTY_ACCESS",
            data.user_id,
            data.property_id,
            {
                "access_level": data.access_level.value,
                "previous_access_level": previous_level,
                "expires_at": expires_at.isoformat() if expires_at else None,
            },
        )
        return PropertyAccessRead.model_validate(grant)

    async def revoke(self, user_id: int, property_id: int) -> None:
        await self._require_manager(property_id)
        grant = await self.repos.property_access.get_grant(user_id, property_id)
        if grant is None:
            raise NotFoundError("Property access", f"{user_id}-{property_id}")
        previous_level = grant.access_level
        await self.repos.property_access.delete(grant.id)
        logger.info(f"User {self.user.id} revoked access of user {user_id} on property {property_id}")
        await self.audit.log_property_access(
            "REVOKE_PROPERTY_ACCESS", user_id, property_id, {"previous_access_level": previous_level}
        )

    async def update(self, grant_id: int, data: PropertyAccessUpdate) -> PropertyAccessRead:
        grant = await self.repos.property_access.get_by_id(grant_id)
        if grant is None:
            raise NotFoundError("Property access", grant_id)
        await self._require_manager(grant.property_id)

        before = {"access_level": grant.access_level, "expires_at": grant.expires_at}
        changes = data.model_dump(exclude_unset=True)
        if changes.get("access_level") is not None:
            grant.access_level = changes["access_level"].value
        if "expires_at" in changes:
            grant.expires_at = as_naive_utc(changes["expires_at"])
        grant = await self.repos.property_access.update(grant)
        await self.audit.log_property_access(
            "UPDATE_PROPERTY_ACCESS",
            grant.user_id,
            grant.property_id,
            {
                "before": before,
                "after": {"access_level": grant.access_level, "expires_at": grant.expires_at},
            },
        )
        return PropertyAccessRead.model_validate(grant)

    async def list_for_property(self, property_id: int) -> List[PropertyAccessRead]:
        await self.access.require_property(property_id)
        grants = await self.repos.property_access.list_for_property(property_id)
        return [PropertyAccessRead.model_validate(g) for g in grants]

    async def list_for_user(self, user_id: int, *, include_expired: bool = False) -> List[PropertyAccessRead]:
        """A user's grants. Other users' grants need ``users.read``."""
        if user_id != self.user.id:
            self.access.require("users.read")
        grants = await self.repos.property_access.list_for_user(user_id, include_expired=include_expired)
        return [PropertyAccessRead.model_validate(g) for g in grants]

    async def bulk_grant(self, data: BulkAccessGrant) -> BulkGrantResult:
        """Grant one level to several users; failures are reported per user."""
        await self._require_manager(data.property_id)
        granted: List[PropertyAccessRead] = []
        failed: List[BulkGrantFailure] = []
        for user_id in dict.fromkeys(data.user_ids):
            try:
                granted.append(
                    await self.grant(
                        PropertyAccessGrant(
                            user_id=user_id,
                            property_id=data.property_id,
                            access_level=data.access_level,
                            expires_at=data.expires_at,
                        )
                    )
                )
            except FnbCostError as e:
                failed.append(BulkGrantFailure(user_id=user_id, error=e.message))
        await self.audit.log_bulk_operation(
            "BULK_GRANT_PROPERTY_ACCESS",
            "property_access",
            total_items=len(granted) + len(failed),
            success_count=len(granted),
            failure_count=len(failed),
            property_id=data.property_id,
        )
        return BulkGrantResult(granted=granted, failed=failed)

    async def cleanup_expired(self) -> AccessCleanupResult:
        self.access.require_super_admin()
        deleted = await self.repos.property_access.delete_expired()
        logger.info(f"Removed {deleted} expired property grants")
        return AccessCleanupResult(deleted_count=deleted)
