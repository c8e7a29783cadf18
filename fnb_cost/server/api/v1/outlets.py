"""
Outlet Management Endpoints.

Outlets are the points of sale of a property; cost entries are recorded
per outlet.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from fnb_cost.core.models.io.outlets import OutletCreate, OutletRead, OutletUpdate
from fnb_cost.server.services.deps import OutletServiceDep

router = APIRouter(tags=["outlets"])


@router.get(
    "",
    response_model=List[OutletRead],
    summary="List Outlets",
    description="List outlets visible to the caller, optionally for a single property.",
    response_description="Outlets ordered by name.",
)
async def list_outlets(
    outlets: OutletServiceDep,
    property_id: Optional[int] = Query(None, description="Restrict to one property"),
    active_only: bool = Query(False, description="Skip inactive outlets"),
) -> List[OutletRead]:
    return await outlets.list_outlets(property_id=property_id, active_only=active_only)


@router.post(
    "",
    response_model=OutletRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Outlet",
    description="Create an outlet in an accessible property.",
    response_description="The created outlet.",
    responses={409: {"description": "Outlet code already used in the property"}},
)
async def create_outlet(data: OutletCreate, outlets: OutletServiceDep) -> OutletRead:
    return await outlets.create_outlet(data)


@router.get(
    "/{outlet_id}",
    response_model=OutletRead,
    summary="Get Outlet",
    description="Retrieve one outlet of an accessible property.",
    response_description="The outlet.",
    responses={404: {"description": "Outlet not found"}},
)
async def get_outlet(outlet_id: int, outlets: OutletServiceDep) -> OutletRead:
    return await outlets.get_outlet(outlet_id)


@router.patch(
    "/{outlet_id}",
    response_model=OutletRead,
    summary="Update Outlet",
    description="Update outlet details.",
    response_description="The updated outlet.",
)
async def update_outlet(outlet_id: int, data: OutletUpdate, outlets: OutletServiceDep) -> OutletRead:
    return await outlets.update_outlet(outlet_id, data)


@router.delete(
    "/{outlet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Outlet",
    description="Delete an outlet that has no cost entries.",
    responses={409: {"description": "Outlet has cost entries"}},
)
async def delete_outlet(outlet_id: int, outlets: OutletServiceDep) -> None:
    await outlets.delete_outlet(outlet_id)
