"""
Shared Services Module

Tenant context, database routing and paging shared across the platform.
"""

from .tenant_context import (
    TenantContext,
    clear_tenant_id,
    get_tenant_context,
    get_tenant_id,
    set_tenant_id,
    tenant_scope,
)

__all__ = [
    "TenantContext",
    "clear_tenant_id",
    "get_tenant_context",
    "get_tenant_id",
    "set_tenant_id",
    "tenant_scope",
]
