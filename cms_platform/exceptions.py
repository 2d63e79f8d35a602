"""
Platform Exceptions

Domain errors raised by the services and mapped to HTTP responses by the
API gateway exception handlers.
"""

from typing import Optional


class CMSError(Exception):
    """Base class for all platform errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(CMSError):
    """No authenticated principal on a protected path."""

    status_code = 401


class AccessDeniedError(CMSError):
    """Authenticated principal lacks the required role."""

    status_code = 403


class ResourceNotFoundError(CMSError):
    """Requested entity does not exist in the active database."""

    status_code = 404


class ResourceAlreadyExistsError(CMSError):
    """A uniqueness constraint would be violated."""

    status_code = 409


class ProvisioningError(CMSError):
    """Tenant database or collection creation failed."""

    def __init__(self, message: str, tenant_id: Optional[str] = None):
        super().__init__(message)
        self.tenant_id = tenant_id


class DeprovisioningError(CMSError):
    """Tenant database drop failed; the tenant record was kept."""

    def __init__(self, message: str, tenant_id: Optional[str] = None):
        super().__init__(message)
        self.tenant_id = tenant_id
