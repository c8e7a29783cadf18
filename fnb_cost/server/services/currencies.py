"""
Currency management service.

Any authenticated user can read currencies; creating, changing, deleting and
choosing the default currency is reserved for super admins. Seeded system
currencies can only be switched on or off, re-rated or re-localised.
"""

from __future__ import annotations

from typing import List, Optional

from fnb_cost.core.database.entities import Currency, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import ConflictError, NotFoundError, ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.currencies import CurrencyCreate, CurrencyRead, CurrencyUpdate

from .access import AccessControl
from .audit import AuditService, snapshot

logger = get_logger(__name__)

RESOURCE = "currency"
SYSTEM_CURRENCY_FIELDS = {"is_active", "exchange_rate", "locale"}


def _warnings(code: str, symbol: str, exchange_rate: Optional[float]) -> List[str]:
    warnings = []
    if len(symbol) > 3:
        warnings.append("symbol is unusually long")
    if code == symbol:
        warnings.append("code and symbol are identical")
    if exchange_rate is not None and exchange_rate > 100_000:
        warnings.append("exchange rate looks unusual")
    return warnings


class CurrencyService:
    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _get(self, currency_id: int) -> Currency:
        currency = await self.repos.currencies.get_by_id(currency_id)
        if currency is None:
            raise NotFoundError("Currency", currency_id)
        return currency

    async def list_currencies(
        self,
        is_active: Optional[bool] = None,
        is_system_currency: Optional[bool] = None,
        search_term: Optional[str] = None,
    ) -> List[CurrencyRead]:
        currencies = await self.repos.currencies.search(
            is_active=is_active, is_system_currency=is_system_currency, search_term=search_term
        )
        return [CurrencyRead.model_validate(c) for c in currencies]

    async def list_active(self) -> List[CurrencyRead]:
        return await self.list_currencies(is_active=True)

    async def get_currency(self, currency_id: int) -> CurrencyRead:
        return CurrencyRead.model_validate(await self._get(currency_id))

    async def get_by_code(self, code: str) -> CurrencyRead:
        currency = await self.repos.currencies.get_by_code(code)
        if currency is None:
            raise NotFoundError("Currency", code.upper())
        return CurrencyRead.model_validate(currency)

    async def get_default(self) -> CurrencyRead:
        currency = await self.repos.currencies.get_default()
        if currency is None:
            raise NotFoundError("Currency", "default")
        return CurrencyRead.model_validate(currency)

    async def create_currency(self, data: CurrencyCreate) -> CurrencyRead:
        self.access.require_super_admin()
        code = data.code.upper()
        if await self.repos.currencies.get_by_code(code) is not None:
            raise ConflictError(f"Currency code {code} already exists")
        for warning in _warnings(code, data.symbol, data.exchange_rate):
            logger.warning(f"Currency {code}: {warning}")

        currency = await self.repos.currencies.create(
            Currency(
                **data.model_dump(exclude={"code"}),
                code=code,
                is_system_currency=False,
                is_default=False,
                created_by=self.user.id,
            )
        )
        logger.info(f"User {self.user.id} created currency {code}")
        await self.audit.log_data_change("CREATE", RESOURCE, currency.id, after=currency)
        return CurrencyRead.model_validate(currency)

    async def update_currency(self, currency_id: int, data: CurrencyUpdate) -> CurrencyRead:
        self.access.require_super_admin()
        currency = await self._get(currency_id)
        changes = data.model_dump(exclude_unset=True)
        if currency.is_system_currency and set(changes) - SYSTEM_CURRENCY_FIELDS:
            raise ValidationFailedError(
                "System currencies can only have their status, exchange rate and locale updated",
                details={"allowed": sorted(SYSTEM_CURRENCY_FIELDS)},
            )
        make_default = changes.pop("is_default", None)
        if changes.get("is_active") is False and (currency.is_default or make_default):
            raise ValidationFailedError("The default currency cannot be deactivated")

        before = snapshot(currency)
        for key, value in changes.items():
            if value is None and key not in ("exchange_rate", "locale"):
                continue
            setattr(currency, key, value)
        if make_default and not currency.is_default:
            currency = await self.repos.currencies.make_default(currency)
        else:
            currency = await self.repos.currencies.update(currency)
        await self.audit.log_data_change("UPDATE", RESOURCE, currency.id, before=before, after=currency)
        return CurrencyRead.model_validate(currency)

    async def delete_currency(self, currency_id: int) -> None:
        self.access.require_super_admin()
        currency = await self._get(currency_id)
        if currency.is_system_currency:
            raise ConflictError("System currencies cannot be deleted")
        if currency.is_default:
            raise ConflictError("The default currency cannot be deleted; set another default first")
        in_use = await self.repos.currencies.count_properties(currency_id)
        if in_use:
            raise ConflictError(f"Currency is in use by {in_use} properties", details={"properties": in_use})

        before = snapshot(currency)
        await self.repos.currencies.delete(currency_id)
        logger.info(f"User {self.user.id} deleted currency {currency.code}")
        await self.audit.log_data_change("DELETE", RESOURCE, currency_id, before=before)

    async def set_default(self, currency_id: int) -> CurrencyRead:
        """Make ``currency_id`` the only default currency."""
        self.access.require_super_admin()
        currency = await self._get(currency_id)
        if not currency.is_active:
            raise ValidationFailedError("Cannot set an inactive currency as default")
        if not currency.is_default:
            currency = await self.repos.currencies.make_default(currency)
            await self.audit.log_data_change(
                "UPDATE", RESOURCE, currency.id, before={"is_default": False}, after={"is_default": True}
            )
        return CurrencyRead.model_validate(currency)
