"""
Currency I/O models for API requests and responses.

Inputs are stripped of surrounding whitespace. Codes are ISO 4217 style
(three letters, stored upper case); symbols may not contain markup or
path characters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

CODE_PATTERN = r"^[A-Za-z]{3}$"
NAME_PATTERN = r"^[A-Za-z0-9\s\-\.']+$"
SYMBOL_PATTERN = r"^[^<>\"'&\\/|;]+$"
LOCALE_PATTERN = r"^[a-z]{2,3}(-[A-Z]{2})?$"
MAX_EXCHANGE_RATE = 1_000_000


class CurrencyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    symbol: str
    display_name: str
    decimal_places: int
    is_active: bool
    is_default: bool
    is_system_currency: bool
    exchange_rate: Optional[float] = None
    locale: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class CurrencyCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    code: str = Field(pattern=CODE_PATTERN, description="Three-letter ISO 4217 code")
    name: str = Field(min_length=1, max_length=100, pattern=NAME_PATTERN)
    symbol: str = Field(min_length=1, max_length=10, pattern=SYMBOL_PATTERN)
    display_name: str = Field(min_length=1, max_length=50)
    decimal_places: int = Field(default=2, ge=0, le=4)
    exchange_rate: Optional[float] = Field(default=None, gt=0, le=MAX_EXCHANGE_RATE)
    locale: Optional[str] = Field(default=None, pattern=LOCALE_PATTERN, description="e.g. en-US")
    is_active: bool = True


class CurrencyUpdate(BaseModel):
    """Partial update. System currencies accept only ``is_active``, ``exchange_rate`` and ``locale``."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100, pattern=NAME_PATTERN)
    symbol: Optional[str] = Field(default=None, min_length=1, max_length=10, pattern=SYMBOL_PATTERN)
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    decimal_places: Optional[int] = Field(default=None, ge=0, le=4)
    exchange_rate: Optional[float] = Field(default=None, gt=0, le=MAX_EXCHANGE_RATE)
    locale: Optional[str] = Field(default=None, pattern=LOCALE_PATTERN)
    is_active: Optional[bool] = None
    is_default: Optional[bool] = None
