"""
Category Service

Business rules for categories in the active tenant database.
"""

from typing import Optional
from uuid import uuid4

from structlog import get_logger

from ..contacts.db_service import ContactDBService
from ..contacts.models import Contact
from ..exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from ..shared_services.pagination import PagedResponse, PageRequest
from ..shared_services.tenant_context import get_tenant_id
from .db_service import CategoryDBService
from .models import Category, CategoryCreateRequest, CategoryUpdateRequest

logger = get_logger()


class CategoryService:
    """Category operations scoped to the current tenant."""

    def __init__(self, category_db: CategoryDBService, contact_db: ContactDBService):
        self.category_db = category_db
        self.contact_db = contact_db

    async def get_all_categories(
        self, page_request: PageRequest, category_name: Optional[str] = None
    ) -> PagedResponse[Category]:
        logger.debug(
            "fetching_categories",
            tenant_id=get_tenant_id(),
            category_name=category_name,
            page=page_request.page,
        )
        categories, total = await self.category_db.find_categories(
            page_request, category_name=category_name
        )
        return PagedResponse[Category].from_page(categories, total, page_request)

    async def get_category_by_id(self, category_id: str) -> Category:
        category = await self.category_db.get_category_by_id(category_id)
        if not category:
            logger.error("category_not_found", tenant_id=get_tenant_id(), category_id=category_id)
            raise ResourceNotFoundError(f"Category not found with id: {category_id}")
        return category

    async def create_category(self, request: CategoryCreateRequest) -> Category:
        """
        Create a category.

        Raises:
            ResourceAlreadyExistsError: If the name is taken (case-insensitive)
        """
        tenant_id = get_tenant_id()

        if await self.category_db.name_exists(request.category_name):
            logger.error("category_name_taken", tenant_id=tenant_id, name=request.category_name)
            raise ResourceAlreadyExistsError(
                f"Category with name: {request.category_name} already exists"
            )

        category = Category(
            category_id=uuid4().hex,
            category_name=request.category_name,
            description=request.description,
        )
        await self.category_db.insert_category(category)

        logger.info("created_category", tenant_id=tenant_id, category_id=category.category_id)
        return category

    async def update_category(self, category_id: str, request: CategoryUpdateRequest) -> Category:
        """
        Apply a partial update.

        Raises:
            ResourceNotFoundError: If the category does not exist
            ResourceAlreadyExistsError: If the new name is taken
        """
        tenant_id = get_tenant_id()
        existing = await self.get_category_by_id(category_id)

        if (
            request.category_name is not None
            and request.category_name.lower() != existing.category_name.lower()
            and await self.category_db.name_exists(request.category_name)
        ):
            logger.error("category_name_taken", tenant_id=tenant_id, name=request.category_name)
            raise ResourceAlreadyExistsError(
                f"Category with name: {request.category_name} already exists"
            )

        update_data = request.model_dump(exclude_none=True)
        if not update_data:
            return existing

        updated = await self.category_db.update_category(category_id, update_data)
        if not updated:
            raise ResourceNotFoundError(f"Category not found with id: {category_id}")

        logger.info("updated_category", tenant_id=tenant_id, category_id=category_id)
        return updated

    async def delete_category(self, category_id: str) -> None:
        """Delete a category and detach it from every contact."""
        tenant_id = get_tenant_id()

        if not await self.category_db.delete_category(category_id):
            logger.error("category_not_found", tenant_id=tenant_id, category_id=category_id)
            raise ResourceNotFoundError(f"Category not found with id: {category_id}")

        detached = await self.contact_db.remove_category_from_all(category_id)
        logger.info(
            "deleted_category",
            tenant_id=tenant_id,
            category_id=category_id,
            contacts_updated=detached,
        )

    async def get_category_contacts(
        self,
        category_id: str,
        page_request: PageRequest,
        contact_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> PagedResponse[Contact]:
        """List contacts in a category, filtered by name or else by phone."""
        await self.get_category_by_id(category_id)

        if contact_name:
            contacts, total = await self.contact_db.find_contacts(
                page_request, contact_name=contact_name, category_ids=[category_id]
            )
        elif phone:
            contacts, total = await self.contact_db.find_contacts(
                page_request, phone=phone, category_ids=[category_id]
            )
        else:
            contacts, total = await self.contact_db.find_contacts(
                page_request, category_ids=[category_id]
            )

        return PagedResponse[Contact].from_page(contacts, total, page_request)
