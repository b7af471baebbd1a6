"""
Pydantic schemas for catalog requests and responses.
"""
from datetime import datetime
from typing import List
from pydantic import BaseModel, Field, ConfigDict

from app.core.vocabulary import CatalogStatus


class CatalogCreate(BaseModel):
    """Schema for creating a catalog item. The value is trimmed by the service."""
    value: str = Field(..., description="Display value, at most 100 characters after trimming")


class CatalogUpdate(BaseModel):
    """Schema for renaming a catalog item."""
    value: str = Field(..., description="New display value")


class CatalogReorder(BaseModel):
    """Schema for rewriting the display order of one catalog type."""
    ids: List[int] = Field(..., description="Every active item id of the type, in the new order")


class CatalogResponse(BaseModel):
    """Schema for catalog item response."""
    id: int
    type: str
    value: str
    display_order: int
    is_active: bool
    status: CatalogStatus
    created_by: int | None = None
    updated_by: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CatalogDeleted(BaseModel):
    """Schema returned after a soft delete."""
    id: int
