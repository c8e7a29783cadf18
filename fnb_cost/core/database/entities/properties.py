"""
Property entity models.

A property is the tenant unit of the system (a hotel, restaurant, resort...).
Outlets, cost entries and daily summaries all belong to exactly one property.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Property(Base, table=True):
    """Entity for properties.

    Table: properties
    """

    __tablename__ = "properties"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=191)
    property_code: str = Field(max_length=64, unique=True, index=True)
    property_type: str = Field(default="restaurant", max_length=32)
    address: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=128)
    country: Optional[str] = Field(default=None, max_length=128)
    currency_id: Optional[int] = Field(default=None, foreign_key="currencies.id", index=True)

    owner_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    manager_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Property(id={self.id}, code={self.property_code}, name={self.name})"
