"""
Cost category entity models.

Categories classify cost entry details. Each category belongs to the Food or
the Beverage family.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Category(Base, table=True):
    """Entity for cost categories.

    Table: categories
    """

    __tablename__ = "categories"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=191)
    description: Optional[str] = Field(default=None, max_length=255)
    type: str = Field(max_length=16, index=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Category(id={self.id}, name={self.name}, type={self.type})"
