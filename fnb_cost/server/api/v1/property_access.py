"""
Property Access Endpoints.

Grant, revoke and inspect per-property access for users.
"""

from typing import List

from fastapi import APIRouter, Query, status

from fnb_cost.core.models.io.property_access import (
    AccessCleanupResult,
    BulkAccessGrant,
    BulkGrantResult,
    PropertyAccessGrant,
    PropertyAccessRead,
    PropertyAccessUpdate,
)
from fnb_cost.server.services.deps import PropertyAccessServiceDep

router = APIRouter(tags=["property-access"])


@router.post(
    "",
    response_model=PropertyAccessRead,
    summary="Grant Property Access",
    description="Grant a user access to a property, replacing any existing grant of that user on the property.",
    response_description="The grant.",
    responses={403: {"description": "Caller cannot manage access on the property"}},
)
async def grant_access(data: PropertyAccessGrant, access: PropertyAccessServiceDep) -> PropertyAccessRead:
    return await access.grant(data)


@router.post(
    "/bulk",
    response_model=BulkGrantResult,
    summary="Bulk Grant Property Access",
    description="Grant one access level on a property to several users. Failures are reported per user.",
    response_description="Granted rows and per-user failures.",
)
async def bulk_grant(data: BulkAccessGrant, access: PropertyAccessServiceDep) -> BulkGrantResult:
    return await access.bulk_grant(data)


@router.delete(
    "/cleanup",
    response_model=AccessCleanupResult,
    summary="Remove Expired Grants",
    description="Delete every expired grant. Super admin only.",
    response_description="Number of deleted grants.",
)
async def cleanup_expired(access: PropertyAccessServiceDep) -> AccessCleanupResult:
    return await access.cleanup_expired()


@router.delete(
    "/users/{user_id}/properties/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke Property Access",
    description="Remove a user's grant on a property.",
    responses={404: {"description": "No grant for the user and property"}},
)
async def revoke_access(user_id: int, property_id: int, access: PropertyAccessServiceDep) -> None:
    await access.revoke(user_id, property_id)


@router.get(
    "/properties/{property_id}",
    response_model=List[PropertyAccessRead],
    summary="List Grants of a Property",
    description="Every grant on one property.",
    response_description="Grants on the property.",
)
async def list_for_property(property_id: int, access: PropertyAccessServiceDep) -> List[PropertyAccessRead]:
    return await access.list_for_property(property_id)


@router.get(
    "/users/{user_id}",
    response_model=List[PropertyAccessRead],
    summary="List Grants of a User",
    description="Grants held by one user; expired grants are skipped unless requested.",
    response_description="Grants of the user.",
)
async def list_for_user(
    user_id: int,
    access: PropertyAccessServiceDep,
    include_expired: bool = Query(False),
) -> List[PropertyAccessRead]:
    return await access.list_for_user(user_id, include_expired=include_expired)


@router.patch(
    "/{grant_id}",
    response_model=PropertyAccessRead,
    summary="Update Property Access",
    description="Change the access level or expiry of a grant.",
    response_description="The updated grant.",
    responses={404: {"description": "Grant not found"}},
)
async def update_access(
    grant_id: int, data: PropertyAccessUpdate, access: PropertyAccessServiceDep
) -> PropertyAccessRead:
    return await access.update(grant_id, data)
