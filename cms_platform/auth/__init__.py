"""
Authentication Module

Tenant credentials, JWT bearer tokens and role checks.
"""

from .dependencies import get_current_principal, require_role, resolve_principal
from .models import ANONYMOUS_PRINCIPAL, Principal
from .security import create_access_token, get_password_hash, verify_password

__all__ = [
    "ANONYMOUS_PRINCIPAL",
    "Principal",
    "create_access_token",
    "get_password_hash",
    "verify_password",
    "get_current_principal",
    "require_role",
    "resolve_principal",
]
