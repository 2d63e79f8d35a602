"""
Category Models

Categories live in the tenant database, collection "categories".
"""

from typing import Optional

from pydantic import BaseModel, Field


class Category(BaseModel):
    """Contact grouping."""

    category_id: str = Field(..., description="Unique category identifier")
    category_name: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None)


class CategoryCreateRequest(BaseModel):
    """Request model for creating a category."""

    category_name: str = Field(..., min_length=1, description="Category name is required")
    description: Optional[str] = Field(default=None, max_length=500)


class CategoryUpdateRequest(BaseModel):
    """Partial update; omitted fields are kept."""

    category_name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, max_length=500)
