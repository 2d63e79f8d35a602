"""
Tenant Management Module

Tenant records, tenant database provisioning and tenant administration.
"""

from .models import Tenant, TenantRole
from .schema import TenantCreateRequest, TenantResponse, TenantUpdateRequest

__all__ = [
    "Tenant",
    "TenantRole",
    "TenantCreateRequest",
    "TenantUpdateRequest",
    "TenantResponse",
]
