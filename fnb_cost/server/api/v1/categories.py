"""
Cost Category Endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from fnb_cost.core.models.domain import CategoryType
from fnb_cost.core.models.io.categories import CategoryCreate, CategoryRead, CategoryUpdate
from fnb_cost.server.services.deps import CategoryServiceDep

router = APIRouter(tags=["categories"])


@router.get(
    "",
    response_model=List[CategoryRead],
    summary="List Categories",
    description="List cost categories, optionally of one type (Food or Beverage).",
    response_description="Categories ordered by name.",
)
async def list_categories(
    categories: CategoryServiceDep,
    type: Optional[CategoryType] = Query(None, description="Food or Beverage"),
) -> List[CategoryRead]:
    return await categories.list_categories(type)


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Category",
    description="Create a cost category.",
    response_description="The created category.",
    responses={409: {"description": "Category already exists for the type"}},
)
async def create_category(data: CategoryCreate, categories: CategoryServiceDep) -> CategoryRead:
    return await categories.create_category(data)


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    summary="Get Category",
    description="Retrieve one cost category.",
    response_description="The category.",
    responses={404: {"description": "Category not found"}},
)
async def get_category(category_id: int, categories: CategoryServiceDep) -> CategoryRead:
    return await categories.get_category(category_id)


@router.patch(
    "/{category_id}",
    response_model=CategoryRead,
    summary="Update Category",
    description="Rename or re-describe a cost category.",
    response_description="The updated category.",
)
async def update_category(category_id: int, data: CategoryUpdate, categories: CategoryServiceDep) -> CategoryRead:
    return await categories.update_category(category_id, data)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Category",
    description="Delete a category not referenced by any cost entry.",
    responses={409: {"description": "Category in use"}},
)
async def delete_category(category_id: int, categories: CategoryServiceDep) -> None:
    await categories.delete_category(category_id)
