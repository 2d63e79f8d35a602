"""
Contacts API Router

REST API endpoints for contacts of the authenticated tenant.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from structlog import get_logger

from ..auth.dependencies import require_role
from ..categories.db_service import CategoryDBService
from ..categories.models import Category
from ..config import get_config
from ..shared_services.pagination import PagedResponse, PageRequest, SortOrder
from ..tenant_management.models import TenantRole
from .db_service import ContactDBService
from .models import Contact, ContactCreateRequest, ContactUpdateRequest
from .service import ContactService

config = get_config()
logger = get_logger()

router = APIRouter(
    prefix="/contacts",
    tags=["Contacts"],
    dependencies=[Depends(require_role(TenantRole.USER))],
)


def get_contact_service(request: Request) -> ContactService:
    """Dependency to get contact service for the current tenant."""
    database_router = request.app.state.database_router
    return ContactService(ContactDBService(database_router), CategoryDBService(database_router))


def get_page_request(
    page: int = Query(0, ge=0),
    page_size: int = Query(config.default_page_size, ge=1, le=config.max_page_size),
    sort_by: str = Query("contact_name"),
    sort_order: SortOrder = Query(SortOrder.ASC),
) -> PageRequest:
    return PageRequest(page=page, size=page_size, sort_by=sort_by, sort_order=sort_order)


@router.get("/", response_model=PagedResponse[Contact], summary="List contacts")
async def list_contacts(
    contact_name: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    category_name: Optional[str] = Query(None),
    page_request: PageRequest = Depends(get_page_request),
    contact_service: ContactService = Depends(get_contact_service),
) -> PagedResponse[Contact]:
    logger.info(
        "fetching_contacts",
        contact_name=contact_name,
        phone=phone,
        category_name=category_name,
        page=page_request.page,
    )
    return await contact_service.get_all_contacts(
        page_request, contact_name=contact_name, phone=phone, category_name=category_name
    )


@router.get("/{contact_id}", response_model=Contact, summary="Get contact by ID")
async def get_contact(
    contact_id: str,
    contact_service: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contact_service.get_contact_by_id(contact_id)


@router.post(
    "/",
    response_model=Contact,
    status_code=status.HTTP_201_CREATED,
    summary="Create contact",
)
async def create_contact(
    request: ContactCreateRequest,
    contact_service: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contact_service.create_contact(request)


@router.patch("/{contact_id}", response_model=Contact, summary="Update contact")
async def update_contact(
    contact_id: str,
    request: ContactUpdateRequest,
    contact_service: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contact_service.update_contact(contact_id, request)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete contact")
async def delete_contact(
    contact_id: str,
    contact_service: ContactService = Depends(get_contact_service),
) -> None:
    await contact_service.delete_contact(contact_id)


@router.get(
    "/{contact_id}/categories",
    response_model=PagedResponse[Category],
    summary="List a contact's categories",
)
async def list_contact_categories(
    contact_id: str,
    category_name: Optional[str] = Query(None),
    page: int = Query(0, ge=0),
    page_size: int = Query(config.default_page_size, ge=1, le=config.max_page_size),
    sort_by: str = Query("category_name"),
    sort_order: SortOrder = Query(SortOrder.ASC),
    contact_service: ContactService = Depends(get_contact_service),
) -> PagedResponse[Category]:
    page_request = PageRequest(page=page, size=page_size, sort_by=sort_by, sort_order=sort_order)
    return await contact_service.get_contact_categories(
        contact_id, page_request, category_name=category_name
    )


@router.post(
    "/{contact_id}/categories/{category_id}",
    response_model=Contact,
    summary="Assign category to contact",
)
async def add_category_to_contact(
    contact_id: str,
    category_id: str,
    contact_service: ContactService = Depends(get_contact_service),
) -> Contact:
    return await contact_service.add_category_to_contact(contact_id, category_id)


@router.delete(
    "/{contact_id}/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove category from contact",
)
async def remove_category_from_contact(
    contact_id: str,
    category_id: str,
    contact_service: ContactService = Depends(get_contact_service),
) -> None:
    await contact_service.remove_category_from_contact(contact_id, category_id)
