"""
Currency entity models.

Properties report their figures in one currency. System currencies are
seeded with the database and can only be toggled, re-rated or re-localised;
exactly one active currency is the default.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Currency(Base, table=True):
    """Entity for currencies.

    Table: currencies
    """

    __tablename__ = "currencies"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    code: str = Field(max_length=3, unique=True, index=True)
    name: str = Field(max_length=100)
    symbol: str = Field(max_length=10)
    display_name: str = Field(max_length=50)
    decimal_places: int = Field(default=2)

    is_active: bool = Field(default=True, index=True)
    is_default: bool = Field(default=False, index=True)
    is_system_currency: bool = Field(default=False)
    exchange_rate: Optional[float] = Field(default=None)
    locale: Optional[str] = Field(default=None, max_length=10)

    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Currency(id={self.id}, code={self.code}, default={self.is_default})"
