"""
Category I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import CategoryType


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    type: CategoryType
    created_at: datetime
    updated_at: datetime


class CategoryCreate(BaseModel):
    name: str = Field(max_length=191)
    description: Optional[str] = Field(default=None, max_length=255)
    type: CategoryType


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[CategoryType] = None
