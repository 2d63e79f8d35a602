"""
Tenant Management API Router

REST API endpoints for tenant CRUD operations. Administrators only.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from structlog import get_logger

from ..auth.dependencies import require_role
from ..config import get_config
from ..shared_services.pagination import PagedResponse, PageRequest, SortOrder
from .db_service import TenantDBService
from .models import TenantRole
from .provisioning import TenantProvisioningService
from .schema import TenantCreateRequest, TenantResponse, TenantUpdateRequest
from .service import TenantService

config = get_config()
logger = get_logger()

router = APIRouter(
    prefix="/platform/tenants",
    tags=["Tenant Management"],
    dependencies=[Depends(require_role(TenantRole.ADMIN))],
)


def get_tenant_service(request: Request) -> TenantService:
    """Dependency to get tenant service."""
    database_router = request.app.state.database_router
    return TenantService(
        TenantDBService(database_router.default_database()),
        TenantProvisioningService(database_router),
        locks=request.app.state.tenant_locks,
    )


@router.get(
    "/",
    response_model=PagedResponse[TenantResponse],
    summary="List tenants",
    description="List tenants with optional name filtering and pagination",
)
async def list_tenants(
    name: Optional[str] = Query(None, description="Case-insensitive name filter"),
    page: int = Query(0, ge=0),
    page_size: int = Query(config.default_page_size, ge=1, le=config.max_page_size),
    sort_by: str = Query("name"),
    sort_order: SortOrder = Query(SortOrder.ASC),
    tenant_service: TenantService = Depends(get_tenant_service),
) -> PagedResponse[TenantResponse]:
    logger.info("fetching_tenants", name=name, page=page)
    page_request = PageRequest(page=page, size=page_size, sort_by=sort_by, sort_order=sort_order)
    tenants = await tenant_service.get_all_tenants(page_request, name=name)
    return PagedResponse[TenantResponse].from_page(
        [TenantResponse.from_tenant(t) for t in tenants.content],
        tenants.total_elements,
        page_request,
    )


@router.get("/{tenant_id}", response_model=TenantResponse, summary="Get tenant by ID")
async def get_tenant(
    tenant_id: str,
    tenant_service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    tenant = await tenant_service.get_tenant_by_id(tenant_id)
    return TenantResponse.from_tenant(tenant)


@router.post(
    "/",
    response_model=TenantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new tenant",
    description="Create a tenant and provision its database unless it is an administrator",
)
async def create_tenant(
    request: TenantCreateRequest,
    tenant_service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    tenant = await tenant_service.create_tenant(request)
    logger.info("created_tenant", tenant_id=tenant.tenant_id)
    return TenantResponse.from_tenant(tenant)


@router.patch("/{tenant_id}", response_model=TenantResponse, summary="Update tenant")
async def update_tenant(
    tenant_id: str,
    request: TenantUpdateRequest,
    tenant_service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    tenant = await tenant_service.update_tenant(tenant_id, request)
    return TenantResponse.from_tenant(tenant)


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete tenant",
    description="Drop the tenant database and remove the tenant record",
)
async def delete_tenant(
    tenant_id: str,
    tenant_service: TenantService = Depends(get_tenant_service),
) -> None:
    await tenant_service.delete_tenant(tenant_id)
