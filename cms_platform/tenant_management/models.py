"""
Tenant Data Models

Defines the tenant record stored in the default database.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TenantRole(str, Enum):
    """Tenant role. Only ordinary tenants get a dedicated database."""

    ADMIN = "ADMIN"
    USER = "USER"


class Tenant(BaseModel):
    """
    Tenant model representing one isolated customer.

    Stored in the default database (not a tenant-specific database),
    whether or not the tenant owns a database of its own.
    """

    tenant_id: str = Field(..., description="Unique tenant identifier")
    name: str = Field(..., description="Tenant display name")
    description: Optional[str] = Field(default=None, description="Tenant description")

    # Credentials
    username: str = Field(..., description="Login name, unique across tenants")
    hashed_password: str

    role: TenantRole = Field(default=TenantRole.USER)

    # Database
    database_name: Optional[str] = Field(
        default=None, description="MongoDB database name (None for administrators)"
    )

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, v):
        """Accept roles case-insensitively."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def is_admin(self) -> bool:
        return self.role == TenantRole.ADMIN

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "tenant_id": "4f1c2b7e9a0d4c5e8b6a3f2d1e0c9b8a",
                "name": "Acme Corp",
                "description": "Acme address book",
                "username": "acme",
                "role": "USER",
                "database_name": "tenant_4f1c2b7e9a0d4c5e8b6a3f2d1e0c9b8a",
            }
        }
