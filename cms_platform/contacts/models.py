"""
Contact Models

Contacts live in the tenant database, collection "contacts".
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Contact(BaseModel):
    """Address book entry."""

    contact_id: str = Field(..., description="Unique contact identifier")
    contact_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, description="Unique within the tenant")
    email: Optional[EmailStr] = Field(default=None)
    category_ids: list[str] = Field(default_factory=list)


class ContactCreateRequest(BaseModel):
    """Request model for creating a contact."""

    contact_name: str = Field(..., min_length=1, description="Contact name is required")
    phone: str = Field(..., min_length=1, description="Phone number is required")
    email: Optional[EmailStr] = Field(default=None)
    category_ids: list[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "contact_name": "Jane Doe",
                "phone": "+1-555-0100",
                "email": "jane@example.com",
                "category_ids": [],
            }
        }


class ContactUpdateRequest(BaseModel):
    """Partial update; omitted fields are kept."""

    contact_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = Field(default=None)
    category_ids: Optional[list[str]] = Field(default=None)
