"""
Authentication Models

The authenticated principal handed to the tenant interceptor, and the
login request/response bodies.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..tenant_management.models import Tenant, TenantRole

ANONYMOUS_USERNAME = "anonymousUser"


class Principal(BaseModel):
    """
    Authenticated caller.

    The tenant id of an ordinary principal selects its database; an
    administrator always works on the default database.
    """

    tenant_id: Optional[str] = Field(default=None)
    username: str
    role: Optional[TenantRole] = Field(default=None)

    @property
    def is_anonymous(self) -> bool:
        return self.tenant_id is None or self.username == ANONYMOUS_USERNAME

    @property
    def is_admin(self) -> bool:
        return self.role == TenantRole.ADMIN

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "Principal":
        return cls(tenant_id=tenant.tenant_id, username=tenant.username, role=tenant.role)


# Placeholder for requests without valid credentials
ANONYMOUS_PRINCIPAL = Principal(username=ANONYMOUS_USERNAME)


class LoginRequest(BaseModel):
    """Username/password login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Issued bearer token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    tenant_id: str
    role: TenantRole
