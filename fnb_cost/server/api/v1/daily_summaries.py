"""
Daily Financial Summary Endpoints.

A summary stores one property's revenue, budget and adjustments for one day.
Its actual cost figures are derived from that day's cost entries.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, status

from fnb_cost.core.models.io.daily_summaries import (
    DailySummaryCreate,
    DailySummaryPage,
    DailySummaryRead,
    DailySummaryUpdate,
)
from fnb_cost.server.services.deps import DailySummaryServiceDep

router = APIRouter(tags=["daily-summaries"])


@router.get(
    "",
    response_model=List[DailySummaryRead],
    summary="List Daily Summaries",
    description="List summaries dated within a range, for one property or every accessible one.",
    response_description="Summaries ordered by date.",
)
async def list_summaries(
    summaries: DailySummaryServiceDep,
    start: date = Query(...),
    end: date = Query(...),
    property_id: Optional[int] = Query(None),
) -> List[DailySummaryRead]:
    return await summaries.list_range(start, end, property_id=property_id)


@router.get(
    "/paginated",
    response_model=DailySummaryPage,
    summary="Paginate Daily Summaries",
    description="Cursor pagination, newest first. Pass the previous page's next_cursor to continue.",
    response_description="One page of summaries.",
)
async def paginate_summaries(
    summaries: DailySummaryServiceDep,
    limit: int = Query(20, ge=1, le=200),
    cursor: Optional[int] = Query(None, description="Id of the last summary already returned"),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    property_id: Optional[int] = Query(None),
) -> DailySummaryPage:
    return await summaries.paginate(limit=limit, cursor=cursor, start=start, end=end, property_id=property_id)


@router.get(
    "/by-date/{summary_date}",
    response_model=DailySummaryRead,
    summary="Get Daily Summary by Date",
    description="Retrieve the summary of one day. Non super admins default to their first accessible property.",
    response_description="The summary.",
    responses={404: {"description": "No summary for the day"}},
)
async def get_by_date(
    summary_date: date,
    summaries: DailySummaryServiceDep,
    property_id: Optional[int] = Query(None),
) -> DailySummaryRead:
    return await summaries.get_by_date(summary_date, property_id)


@router.post(
    "",
    response_model=DailySummaryRead,
    summary="Save Daily Summary",
    description="Create the summary for the day and property, or update it when it already exists.",
    response_description="The saved summary with recalculated cost figures.",
    responses={400: {"description": "Super admin did not name a property"}, 403: {"description": "No access to property"}},
)
async def save_summary(data: DailySummaryCreate, summaries: DailySummaryServiceDep) -> DailySummaryRead:
    return await summaries.save(data)


@router.get(
    "/{summary_id}",
    response_model=DailySummaryRead,
    summary="Get Daily Summary",
    description="Retrieve one summary.",
    response_description="The summary.",
    responses={404: {"description": "Summary not found"}},
)
async def get_summary(summary_id: int, summaries: DailySummaryServiceDep) -> DailySummaryRead:
    return await summaries.get(summary_id)


@router.patch(
    "/{summary_id}",
    response_model=DailySummaryRead,
    summary="Update Daily Summary",
    description="Update inputs or move the summary to another date; cost figures are recalculated.",
    response_description="The updated summary.",
    responses={409: {"description": "A summary already exists for the new date"}},
)
async def update_summary(
    summary_id: int, data: DailySummaryUpdate, summaries: DailySummaryServiceDep
) -> DailySummaryRead:
    return await summaries.update(summary_id, data)


@router.delete(
    "/{summary_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Daily Summary",
    description="Delete one summary.",
)
async def delete_summary(summary_id: int, summaries: DailySummaryServiceDep) -> None:
    await summaries.delete(summary_id)
