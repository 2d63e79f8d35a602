"""
Authentication API Router

Token issuance and principal introspection.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from structlog import get_logger

from ..config import get_config
from ..tenant_management.db_service import TenantDBService
from .dependencies import get_current_principal
from .models import LoginRequest, LoginResponse, Principal
from .security import create_access_token, verify_password

config = get_config()
logger = get_logger()

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/token",
    response_model=LoginResponse,
    summary="Login",
    description="Exchange username and password for a bearer token",
)
async def login(request: Request, credentials: LoginRequest) -> LoginResponse:
    """Verify credentials against the tenant records and issue a JWT."""
    database_router = request.app.state.database_router
    tenant_service = TenantDBService(database_router.default_database())

    tenant = await tenant_service.get_tenant_by_username(credentials.username)
    if not tenant or not verify_password(credentials.password, tenant.hashed_password):
        logger.warning("login_failed", username=credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        {"tenant_id": tenant.tenant_id, "username": tenant.username, "role": tenant.role.value}
    )
    logger.info("login_succeeded", tenant_id=tenant.tenant_id, role=tenant.role)

    return LoginResponse(
        access_token=access_token,
        expires_in=config.jwt_expiry_hours * 3600,
        tenant_id=tenant.tenant_id,
        role=tenant.role,
    )


@router.get("/me", response_model=Principal, summary="Current principal")
async def me(principal: Principal = Depends(get_current_principal)) -> Principal:
    return principal
