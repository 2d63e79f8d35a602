"""
Authentication Dependencies

Resolves the principal behind a request and enforces roles on routes.
"""

from typing import Optional

from fastapi import Depends, Request
from structlog import get_logger

from ..exceptions import AccessDeniedError, UnauthenticatedError
from ..tenant_management.db_service import TenantDBService
from ..tenant_management.models import TenantRole
from .models import ANONYMOUS_PRINCIPAL, Principal
from .security import decode_access_token

logger = get_logger()


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def resolve_principal(request: Request) -> Principal:
    """
    Resolve the principal from the bearer token.

    The tenant record is re-read from the default database so that deleted
    tenants lose access immediately.

    Args:
        request: Incoming HTTP request

    Returns:
        The authenticated principal, or ANONYMOUS_PRINCIPAL
    """
    token = _bearer_token(request)
    if not token:
        return ANONYMOUS_PRINCIPAL

    payload = decode_access_token(token)
    if not payload:
        return ANONYMOUS_PRINCIPAL

    tenant_id: Optional[str] = payload.get("tenant_id")
    if not tenant_id:
        logger.warning("invalid_token_payload")
        return ANONYMOUS_PRINCIPAL

    router = request.app.state.database_router
    tenant = await TenantDBService(router.default_database()).get_tenant_by_id(tenant_id)
    if not tenant:
        logger.warning("token_tenant_not_found", tenant_id=tenant_id)
        return ANONYMOUS_PRINCIPAL

    return Principal.from_tenant(tenant)


async def get_current_principal(request: Request) -> Principal:
    """
    Principal established by the tenant interceptor.

    Raises:
        UnauthenticatedError: If the request carries no valid credentials
    """
    principal: Optional[Principal] = getattr(request.state, "principal", None)
    if principal is None:
        principal = await resolve_principal(request)
    if principal.is_anonymous:
        raise UnauthenticatedError("Authentication required")
    return principal


def require_role(required_role: TenantRole):
    """
    Dependency factory for requiring a specific tenant role.

    Example:
        @router.get("/", dependencies=[Depends(require_role(TenantRole.ADMIN))])

    Args:
        required_role: Role the principal must have

    Returns:
        Dependency function
    """

    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role != required_role:
            logger.warning(
                "insufficient_permissions",
                tenant_id=principal.tenant_id,
                role=principal.role,
                required_role=required_role,
            )
            raise AccessDeniedError(
                "Access denied: You don't have permission to perform this operation"
            )
        return principal

    return role_checker
