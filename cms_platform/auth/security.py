"""
Security Utilities

Tenant password hashing (Argon2id) and the bearer tokens issued at login.
A token carries the tenant id, username and role; the interceptor re-reads
the tenant record on every request, so the claims only identify the caller.
"""

from datetime import datetime, timedelta
from typing import Any, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from structlog import get_logger

from ..config import get_config

config = get_config()
logger = get_logger()

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__memory_cost=65536,  # 64 MB
    argon2__time_cost=3,
    argon2__parallelism=4,
)


def get_password_hash(password: str) -> str:
    """Hash a tenant password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a login password against the stored tenant hash.

    Args:
        plain_password: Password from the login request
        hashed_password: Hash from the tenant record

    Returns:
        True on a match; False on a mismatch or an unreadable hash
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error("password_verification_error", error=str(e))
        return False


def token_lifetime() -> timedelta:
    return timedelta(hours=config.jwt_expiry_hours)


def create_access_token(
    claims: dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign an access token.

    Args:
        claims: Identity claims (tenant_id, username, role)
        expires_delta: Lifetime override, defaults to the configured expiry

    Returns:
        Encoded JWT
    """
    expire = datetime.utcnow() + (expires_delta or token_lifetime())
    payload = {**claims, "exp": expire, "type": ACCESS_TOKEN_TYPE}
    return jwt.encode(payload, config.jwt_secret_key, algorithm=config.jwt_algorithm)


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify signature, expiry and token type.

    Args:
        token: Encoded JWT from the Authorization header

    Returns:
        Claims if the token is a valid access token, None otherwise
    """
    try:
        payload = jwt.decode(token, config.jwt_secret_key, algorithms=[config.jwt_algorithm])
    except JWTError as e:
        logger.warning("jwt_decode_error", error=str(e))
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        logger.warning("jwt_wrong_token_type", token_type=payload.get("type"))
        return None

    return payload
