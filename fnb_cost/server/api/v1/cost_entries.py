"""
Food and Beverage Cost Entry Endpoints.

Both families expose the same routes; ``build_cost_router`` creates one router
per family bound to that family's service dependency. Every write triggers a
recalculation of the owning property's daily summary.
"""

from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Query, status

from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.cost_entries import (
    CostEntryCreate,
    CostEntryRead,
    CostEntryUpdate,
    DetailedCostReport,
)
from fnb_cost.server.services.deps import BeverageCostServiceDep, FoodCostServiceDep

logger = get_logger(__name__)


def build_cost_router(service_dep: Any, label: str) -> APIRouter:
    """Create the router of one cost family.

    Args:
        service_dep: Annotated dependency yielding the family's CostEntryService
        label: Human-readable family name used in the OpenAPI docs
    """
    router = APIRouter(tags=[f"{label.lower()}-costs"])

    @router.get(
        "",
        response_model=List[CostEntryRead],
        summary=f"List {label} Cost Entries",
        description=f"List {label.lower()} cost entries dated within a range, optionally for one outlet.",
        response_description="Entries with their details, newest first.",
    )
    async def list_entries(
        service: service_dep,
        start: date = Query(..., description="First day (inclusive)"),
        end: date = Query(..., description="Last day (inclusive)"),
        outlet_id: Optional[int] = Query(None),
    ) -> List[CostEntryRead]:
        return await service.list_range(start, end, outlet_id=outlet_id)

    @router.post(
        "",
        response_model=CostEntryRead,
        status_code=status.HTTP_201_CREATED,
        summary=f"Save {label} Cost Entry",
        description="Record one outlet's cost for one day split across categories. The total is the sum of the details.",
        response_description="The saved entry.",
        responses={400: {"description": "No details or a negative cost"}, 404: {"description": "Outlet or category not found"}},
    )
    async def save_entry(data: CostEntryCreate, service: service_dep) -> CostEntryRead:
        return await service.save(data)

    @router.get(
        "/by-date",
        response_model=CostEntryRead,
        summary=f"Get {label} Cost Entry by Date",
        description="Retrieve the entry of one outlet for one day.",
        response_description="The entry.",
        responses={404: {"description": "No entry for the day and outlet"}},
    )
    async def get_by_date(
        service: service_dep,
        entry_date: date = Query(..., alias="date"),
        outlet_id: int = Query(...),
    ) -> CostEntryRead:
        return await service.get_by_date_and_outlet(entry_date, outlet_id)

    @router.get(
        "/by-outlet/{outlet_id}",
        response_model=List[CostEntryRead],
        summary=f"List {label} Cost Entries by Outlet",
        description="Every entry of one outlet.",
        response_description="Entries, newest first.",
    )
    async def list_by_outlet(outlet_id: int, service: service_dep) -> List[CostEntryRead]:
        return await service.list_by_outlet(outlet_id)

    @router.get(
        "/report",
        response_model=DetailedCostReport,
        summary=f"Detailed {label} Cost Report",
        description=(
            "Per-outlet category costs over a date range, plus an all-outlets row that folds in revenue, "
            "ENT, OC and other adjustments from the daily summaries."
        ),
        response_description="The report.",
    )
    async def detailed_report(
        service: service_dep,
        start: date = Query(...),
        end: date = Query(...),
        outlet_id: Optional[int] = Query(None),
    ) -> DetailedCostReport:
        return await service.detailed_report(start, end, outlet_id=outlet_id)

    @router.get(
        "/{entry_id}",
        response_model=CostEntryRead,
        summary=f"Get {label} Cost Entry",
        description="Retrieve one entry with its details.",
        response_description="The entry.",
        responses={404: {"description": "Entry not found"}},
    )
    async def get_entry(entry_id: int, service: service_dep) -> CostEntryRead:
        return await service.get(entry_id)

    @router.put(
        "/{entry_id}",
        response_model=CostEntryRead,
        summary=f"Update {label} Cost Entry",
        description="Change date or outlet and replace the details; the total is recomputed.",
        response_description="The updated entry.",
    )
    async def update_entry(entry_id: int, data: CostEntryUpdate, service: service_dep) -> CostEntryRead:
        return await service.update(entry_id, data)

    @router.delete(
        "/{entry_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {label} Cost Entry",
        description="Delete an entry and its details.",
        responses={404: {"description": "Entry not found"}},
    )
    async def delete_entry(entry_id: int, service: service_dep) -> None:
        await service.delete(entry_id)

    return router


food_router = build_cost_router(FoodCostServiceDep, "Food")
beverage_router = build_cost_router(BeverageCostServiceDep, "Beverage")
