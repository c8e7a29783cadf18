"""
Currency Endpoints.

Reads are open to any authenticated user; writes and the default currency
switch are for super admins.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from fnb_cost.core.models.io.currencies import CurrencyCreate, CurrencyRead, CurrencyUpdate
from fnb_cost.server.services.deps import CurrencyServiceDep

router = APIRouter(tags=["currencies"])


@router.get(
    "",
    response_model=List[CurrencyRead],
    summary="List Currencies",
    description="List currencies with the default first, then system currencies, then by name.",
    response_description="Matching currencies.",
)
async def list_currencies(
    currencies: CurrencyServiceDep,
    is_active: Optional[bool] = Query(None),
    is_system_currency: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Matches code, name or display name"),
) -> List[CurrencyRead]:
    return await currencies.list_currencies(is_active, is_system_currency, search)


@router.get(
    "/active",
    response_model=List[CurrencyRead],
    summary="List Active Currencies",
    description="Active currencies for selection lists.",
)
async def list_active_currencies(currencies: CurrencyServiceDep) -> List[CurrencyRead]:
    return await currencies.list_active()


@router.get(
    "/default",
    response_model=CurrencyRead,
    summary="Get Default Currency",
    description="The active default currency.",
    responses={404: {"description": "No default currency configured"}},
)
async def get_default_currency(currencies: CurrencyServiceDep) -> CurrencyRead:
    return await currencies.get_default()


@router.get(
    "/code/{code}",
    response_model=CurrencyRead,
    summary="Get Currency By Code",
    description="Look a currency up by its code, case-insensitively.",
    responses={404: {"description": "Currency not found"}},
)
async def get_currency_by_code(code: str, currencies: CurrencyServiceDep) -> CurrencyRead:
    return await currencies.get_by_code(code)


@router.post(
    "",
    response_model=CurrencyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Currency",
    description="Add a currency. Super admins only.",
    response_description="The created currency.",
    responses={409: {"description": "Code already exists"}},
)
async def create_currency(data: CurrencyCreate, currencies: CurrencyServiceDep) -> CurrencyRead:
    return await currencies.create_currency(data)


@router.get(
    "/{currency_id}",
    response_model=CurrencyRead,
    summary="Get Currency",
    responses={404: {"description": "Currency not found"}},
)
async def get_currency(currency_id: int, currencies: CurrencyServiceDep) -> CurrencyRead:
    return await currencies.get_currency(currency_id)


@router.patch(
    "/{currency_id}",
    response_model=CurrencyRead,
    summary="Update Currency",
    description="Change a currency. System currencies accept only status, exchange rate and locale.",
    response_description="The updated currency.",
)
async def update_currency(currency_id: int, data: CurrencyUpdate, currencies: CurrencyServiceDep) -> CurrencyRead:
    return await currencies.update_currency(currency_id, data)


@router.delete(
    "/{currency_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Currency",
    description="Delete a user-defined currency that is neither the default nor used by a property.",
    responses={409: {"description": "System, default or in-use currency"}},
)
async def delete_currency(currency_id: int, currencies: CurrencyServiceDep) -> None:
    await currencies.delete_currency(currency_id)


@router.post(
    "/{currency_id}/default",
    response_model=CurrencyRead,
    summary="Set Default Currency",
    description="Make an active currency the default.",
    response_description="The new default currency.",
)
async def set_default_currency(currency_id: int, currencies: CurrencyServiceDep) -> CurrencyRead:
    return await currencies.set_default(currency_id)
