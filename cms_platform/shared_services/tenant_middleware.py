"""
Tenant Interceptor Middleware

FastAPI middleware that, for every protected request:
1. Resolves the authenticated principal (rejects with 401 if there is none)
2. Clears any tenant binding for administrators
3. Binds the principal's tenant id for everyone else
4. Clears the binding once the request is finished, whatever the outcome
"""

from typing import Callable, Optional, Sequence

import structlog
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from structlog import get_logger

from ..auth.dependencies import resolve_principal
from ..config import get_config
from .tenant_context import clear_tenant_id, get_tenant_id, set_tenant_id

config = get_config()
logger = get_logger()


class TenantInterceptorMiddleware(BaseHTTPMiddleware):
    """
    Middleware establishing the tenant binding for each request.

    Path filtering is by prefix: a path is intercepted when it matches an
    include prefix and no exclude prefix.
    """

    def __init__(
        self,
        app,
        include_paths: Optional[Sequence[str]] = None,
        exclude_paths: Optional[Sequence[str]] = None,
    ):
        """
        Initialize tenant interceptor.

        Args:
            app: FastAPI application
            include_paths: Path prefixes to intercept (defaults to config)
            exclude_paths: Path prefixes to skip (defaults to config)
        """
        super().__init__(app)

        self.include_paths = tuple(
            include_paths if include_paths is not None else config.tenant_interceptor_include_paths
        )
        self.exclude_paths = tuple(
            exclude_paths if exclude_paths is not None else config.tenant_interceptor_exclude_paths
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with the tenant binding in place.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/route handler

        Returns:
            HTTP response
        """
        path = request.url.path

        if not self._is_intercepted(path):
            return await call_next(request)

        try:
            principal = await resolve_principal(request)

            if principal.is_anonymous:
                logger.error("no_authenticated_user", path=path)
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Authentication required"},
                    headers={"WWW-Authenticate": "Bearer"},
                )

            request.state.principal = principal

            if principal.is_admin:
                if get_tenant_id() is not None:
                    logger.warning("clearing_stale_tenant_binding", path=path)
                clear_tenant_id()
                logger.debug("admin_user_detected_using_default_database", path=path)
            else:
                set_tenant_id(principal.tenant_id)
                structlog.contextvars.bind_contextvars(tenant_id=principal.tenant_id)
                logger.debug(
                    "tenant_context_set",
                    tenant_id=principal.tenant_id,
                    username=principal.username,
                    path=path,
                )

            return await call_next(request)

        finally:
            # Runs on success, error and cancellation alike
            clear_tenant_id()
            structlog.contextvars.unbind_contextvars("tenant_id")
            logger.debug("tenant_context_cleared", path=path)

    def _is_intercepted(self, path: str) -> bool:
        """
        Check whether a path requires a tenant binding.

        Args:
            path: Request path

        Returns:
            True if the interceptor applies
        """
        if any(self._matches(path, prefix) for prefix in self.exclude_paths):
            return False
        return any(self._matches(path, prefix) for prefix in self.include_paths)

    @staticmethod
    def _matches(path: str, prefix: str) -> bool:
        if prefix == "/":
            return True
        prefix = prefix.rstrip("/")
        return path == prefix or path.startswith(prefix + "/")
