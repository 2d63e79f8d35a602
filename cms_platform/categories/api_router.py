"""
Categories API Router

REST API endpoints for categories of the authenticated tenant.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from structlog import get_logger

from ..auth.dependencies import require_role
from ..config import get_config
from ..contacts.db_service import ContactDBService
from ..contacts.models import Contact
from ..shared_services.pagination import PagedResponse, PageRequest, SortOrder
from ..tenant_management.models import TenantRole
from .db_service import CategoryDBService
from .models import Category, CategoryCreateRequest, CategoryUpdateRequest
from .service import CategoryService

config = get_config()
logger = get_logger()

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    dependencies=[Depends(require_role(TenantRole.USER))],
)


def get_category_service(request: Request) -> CategoryService:
    """Dependency to get category service for the current tenant."""
    database_router = request.app.state.database_router
    return CategoryService(CategoryDBService(database_router), ContactDBService(database_router))


@router.get("/", response_model=PagedResponse[Category], summary="List categories")
async def list_categories(
    category_name: Optional[str] = Query(None),
    page: int = Query(0, ge=0),
    page_size: int = Query(config.default_page_size, ge=1, le=config.max_page_size),
    sort_by: str = Query("category_name"),
    sort_order: SortOrder = Query(SortOrder.ASC),
    category_service: CategoryService = Depends(get_category_service),
) -> PagedResponse[Category]:
    logger.info("fetching_categories", category_name=category_name, page=page)
    page_request = PageRequest(page=page, size=page_size, sort_by=sort_by, sort_order=sort_order)
    return await category_service.get_all_categories(page_request, category_name=category_name)


@router.get("/{category_id}", response_model=Category, summary="Get category by ID")
async def get_category(
    category_id: str,
    category_service: CategoryService = Depends(get_category_service),
) -> Category:
    return await category_service.get_category_by_id(category_id)


@router.post(
    "/",
    response_model=Category,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    request: CategoryCreateRequest,
    category_service: CategoryService = Depends(get_category_service),
) -> Category:
    return await category_service.create_category(request)


@router.patch("/{category_id}", response_model=Category, summary="Update category")
async def update_category(
    category_id: str,
    request: CategoryUpdateRequest,
    category_service: CategoryService = Depends(get_category_service),
) -> Category:
    return await category_service.update_category(category_id, request)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete category",
    description="Delete a category and detach it from all contacts",
)
async def delete_category(
    category_id: str,
    category_service: CategoryService = Depends(get_category_service),
) -> None:
    await category_service.delete_category(category_id)


@router.get(
    "/{category_id}/contacts",
    response_model=PagedResponse[Contact],
    summary="List contacts in a category",
)
async def list_category_contacts(
    category_id: str,
    contact_name: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    page: int = Query(0, ge=0),
    page_size: int = Query(config.default_page_size, ge=1, le=config.max_page_size),
    sort_by: str = Query("contact_name"),
    sort_order: SortOrder = Query(SortOrder.ASC),
    category_service: CategoryService = Depends(get_category_service),
) -> PagedResponse[Contact]:
    page_request = PageRequest(page=page, size=page_size, sort_by=sort_by, sort_order=sort_order)
    return await category_service.get_category_contacts(
        category_id, page_request, contact_name=contact_name, phone=phone
    )
