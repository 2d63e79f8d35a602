"""
Tenant Context Management

Provides request-scoped tenant identity for database routing.

The binding lives in a ContextVar, so every asyncio task (and thread) sees
its own value: two requests handled concurrently never observe each other's
tenant.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Context variable to store current tenant id for the request
_tenant_id: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)


class TenantContext:
    """
    Explicit view of the request scope.

    A snapshot that can be passed down the call chain instead of re-reading
    the context variable.
    """

    def __init__(self, tenant_id: Optional[str]):
        self.tenant_id = tenant_id

    @property
    def is_bound(self) -> bool:
        """True when a tenant database is selected for this request."""
        return self.tenant_id is not None

    def __repr__(self) -> str:
        return f"TenantContext(tenant_id={self.tenant_id!r})"


def set_tenant_id(tenant_id: str) -> None:
    """
    Bind a tenant to the current request.

    Args:
        tenant_id: Tenant identifier to bind
    """
    _tenant_id.set(tenant_id)


def get_tenant_id() -> Optional[str]:
    """
    Get the tenant bound to the current request.

    Returns:
        Tenant identifier if bound, None otherwise
    """
    return _tenant_id.get()


def clear_tenant_id() -> None:
    """Remove any tenant binding."""
    _tenant_id.set(None)


def get_tenant_context() -> Optional[TenantContext]:
    """
    Get the tenant context for the current request.

    Returns:
        Tenant context if a tenant is bound, None otherwise
    """
    tenant_id = _tenant_id.get()
    if tenant_id is None:
        return None
    return TenantContext(tenant_id)


@contextmanager
def tenant_scope(tenant_id: Optional[str]) -> Iterator[TenantContext]:
    """
    Bind a tenant for the duration of a block, restoring the previous value on exit.

    Passing None runs the block against the default database.
    """
    token = _tenant_id.set(tenant_id)
    try:
        yield TenantContext(tenant_id)
    finally:
        _tenant_id.reset(token)
