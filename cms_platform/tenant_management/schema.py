"""
Tenant Management API Schemas

Request and response models for tenant management endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .models import Tenant, TenantRole


class TenantCreateRequest(BaseModel):
    """Request model for creating a new tenant."""

    name: str = Field(..., min_length=2, max_length=100, description="Tenant display name")
    description: Optional[str] = Field(
        default=None, max_length=500, description="Tenant description"
    )
    username: str = Field(..., min_length=3, max_length=50, description="Unique login name")
    password: str = Field(..., min_length=1, description="Plain text password")
    role: TenantRole = Field(default=TenantRole.USER)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Acme Corp",
                "description": "Acme address book",
                "username": "acme",
                "password": "s3cret!",
                "role": "USER",
            }
        }


class TenantUpdateRequest(BaseModel):
    """Request model for updating an existing tenant."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)


class TenantResponse(BaseModel):
    """Response model for tenant details (never exposes the password hash)."""

    tenant_id: str
    name: str
    description: Optional[str] = None
    username: str
    role: TenantRole
    database_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "TenantResponse":
        return cls(**tenant.model_dump(exclude={"hashed_password"}))
