"""
Property Management Endpoints.

Properties are the tenant units of the system. Listing only returns the
properties the caller can access unless the caller is a super admin.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import PropertyType
from fnb_cost.core.models.io.properties import (
    OwnershipTransfer,
    PropertyCreate,
    PropertyRead,
    PropertyUpdate,
)
from fnb_cost.server.services.deps import PropertyServiceDep

logger = get_logger(__name__)

router = APIRouter(tags=["properties"])


@router.get(
    "",
    response_model=List[PropertyRead],
    summary="List Properties",
    description="List properties visible to the caller, filtered by state, type, owner or a search term over name, code, address and city.",
    response_description="Matching properties.",
)
async def list_properties(
    properties: PropertyServiceDep,
    is_active: Optional[bool] = Query(None),
    property_type: Optional[PropertyType] = Query(None),
    owner_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
) -> List[PropertyRead]:
    return await properties.list_properties(
        is_active=is_active, property_type=property_type, owner_id=owner_id, search=search
    )


@router.get(
    "/accessible",
    response_model=List[PropertyRead],
    summary="List Accessible Properties",
    description="Active properties the caller can work with.",
    response_description="Accessible properties.",
)
async def accessible_properties(properties: PropertyServiceDep) -> List[PropertyRead]:
    return await properties.accessible_properties()


@router.post(
    "",
    response_model=PropertyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Property",
    description="Create a property. The caller becomes the owner when no owner is given; the owner is granted owner access.",
    response_description="The created property.",
    responses={409: {"description": "Property code already exists"}},
)
async def create_property(data: PropertyCreate, properties: PropertyServiceDep) -> PropertyRead:
    return await properties.create_property(data)


@router.get(
    "/{property_id}",
    response_model=PropertyRead,
    summary="Get Property",
    description="Retrieve one accessible property.",
    response_description="The property.",
    responses={403: {"description": "No access to property"}, 404: {"description": "Property not found"}},
)
async def get_property(property_id: int, properties: PropertyServiceDep) -> PropertyRead:
    return await properties.get_property(property_id)


@router.patch(
    "/{property_id}",
    response_model=PropertyRead,
    summary="Update Property",
    description="Update property details.",
    response_description="The updated property.",
    responses={404: {"description": "Property not found"}, 409: {"description": "Property code already exists"}},
)
async def update_property(property_id: int, data: PropertyUpdate, properties: PropertyServiceDep) -> PropertyRead:
    return await properties.update_property(property_id, data)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Property",
    description="Delete a property without outlets. Super admin only.",
    responses={409: {"description": "Property still has outlets"}},
)
async def delete_property(property_id: int, properties: PropertyServiceDep) -> None:
    await properties.delete_property(property_id)


@router.post(
    "/{property_id}/transfer-ownership",
    response_model=PropertyRead,
    summary="Transfer Ownership",
    description="Make another active user the owner of the property and grant them owner access.",
    response_description="The property with its new owner.",
)
async def transfer_ownership(
    property_id: int, data: OwnershipTransfer, properties: PropertyServiceDep
) -> PropertyRead:
    return await properties.transfer_ownership(property_id, data.new_owner_id)
