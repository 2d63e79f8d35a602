"""
Contact Service

Business rules for contacts in the active tenant database: unique phone
numbers, category references that must exist, and category assignment.
"""

from typing import Optional
from uuid import uuid4

from structlog import get_logger

from ..categories.db_service import CategoryDBService
from ..categories.models import Category
from ..exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from ..shared_services.pagination import PagedResponse, PageRequest
from ..shared_services.tenant_context import get_tenant_id
from .db_service import ContactDBService
from .models import Contact, ContactCreateRequest, ContactUpdateRequest

logger = get_logger()


class ContactService:
    """Contact operations scoped to the current tenant."""

    def __init__(self, contact_db: ContactDBService, category_db: CategoryDBService):
        self.contact_db = contact_db
        self.category_db = category_db

    async def _ensure_categories_exist(self, category_ids: list[str]) -> None:
        missing = await self.category_db.missing_category_ids(category_ids)
        if missing:
            logger.error("category_not_found", tenant_id=get_tenant_id(), category_id=missing[0])
            raise ResourceNotFoundError(f"Category not found with id: {missing[0]}")

    async def get_all_contacts(
        self,
        page_request: PageRequest,
        contact_name: Optional[str] = None,
        phone: Optional[str] = None,
        category_name: Optional[str] = None,
    ) -> PagedResponse[Contact]:
        """
        List contacts filtered by name, phone or category name.

        Filters are exclusive and applied in that order of precedence.
        """
        tenant_id = get_tenant_id()
        logger.debug(
            "fetching_contacts",
            tenant_id=tenant_id,
            contact_name=contact_name,
            phone=phone,
            category_name=category_name,
            page=page_request.page,
        )

        if contact_name:
            contacts, total = await self.contact_db.find_contacts(
                page_request, contact_name=contact_name
            )
        elif phone:
            contacts, total = await self.contact_db.find_contacts(page_request, phone=phone)
        elif category_name:
            category_ids = await self.category_db.find_category_ids_by_name(category_name)
            if not category_ids:
                return PagedResponse[Contact].empty_page(page_request)
            contacts, total = await self.contact_db.find_contacts(
                page_request, category_ids=category_ids
            )
        else:
            contacts, total = await self.contact_db.find_contacts(page_request)

        logger.debug("found_contacts", tenant_id=tenant_id, total=total)
        return PagedResponse[Contact].from_page(contacts, total, page_request)

    async def get_contact_by_id(self, contact_id: str) -> Contact:
        contact = await self.contact_db.get_contact_by_id(contact_id)
        if not contact:
            logger.error("contact_not_found", tenant_id=get_tenant_id(), contact_id=contact_id)
            raise ResourceNotFoundError(f"Contact not found with id: {contact_id}")
        return contact

    async def create_contact(self, request: ContactCreateRequest) -> Contact:
        """
        Create a contact.

        Raises:
            ResourceAlreadyExistsError: If the phone number is taken
            ResourceNotFoundError: If a referenced category does not exist
        """
        tenant_id = get_tenant_id()

        if await self.contact_db.get_contact_by_phone(request.phone):
            logger.error("contact_phone_taken", tenant_id=tenant_id, phone=request.phone)
            raise ResourceAlreadyExistsError(
                f"Contact with phone number {request.phone} already exists"
            )

        if request.category_ids:
            await self._ensure_categories_exist(request.category_ids)

        contact = Contact(
            contact_id=uuid4().hex,
            contact_name=request.contact_name,
            phone=request.phone,
            email=request.email,
            category_ids=list(dict.fromkeys(request.category_ids)),
        )
        await self.contact_db.insert_contact(contact)

        logger.info("created_contact", tenant_id=tenant_id, contact_id=contact.contact_id)
        return contact

    async def update_contact(self, contact_id: str, request: ContactUpdateRequest) -> Contact:
        """
        Apply a partial update.

        Raises:
            ResourceNotFoundError: If the contact or a referenced category does not exist
            ResourceAlreadyExistsError: If the new phone number belongs to another contact
        """
        tenant_id = get_tenant_id()
        existing = await self.get_contact_by_id(contact_id)

        if request.phone is not None and request.phone != existing.phone:
            other = await self.contact_db.get_contact_by_phone(request.phone)
            if other and other.contact_id != contact_id:
                logger.error("contact_phone_taken", tenant_id=tenant_id, phone=request.phone)
                raise ResourceAlreadyExistsError(
                    f"Contact with phone number {request.phone} already exists"
                )

        if request.category_ids:
            await self._ensure_categories_exist(request.category_ids)

        update_data = request.model_dump(exclude_none=True)
        if "category_ids" in update_data:
            update_data["category_ids"] = list(dict.fromkeys(update_data["category_ids"]))
        if not update_data:
            return existing

        updated = await self.contact_db.update_contact(contact_id, update_data)
        if not updated:
            raise ResourceNotFoundError(f"Contact not found with id: {contact_id}")

        logger.info("updated_contact", tenant_id=tenant_id, contact_id=contact_id)
        return updated

    async def delete_contact(self, contact_id: str) -> None:
        tenant_id = get_tenant_id()
        if not await self.contact_db.delete_contact(contact_id):
            logger.error("contact_not_found", tenant_id=tenant_id, contact_id=contact_id)
            raise ResourceNotFoundError(f"Contact not found with id: {contact_id}")
        logger.info("deleted_contact", tenant_id=tenant_id, contact_id=contact_id)

    async def get_contact_categories(
        self,
        contact_id: str,
        page_request: PageRequest,
        category_name: Optional[str] = None,
    ) -> PagedResponse[Category]:
        """List the categories of one contact, optionally filtered by name."""
        contact = await self.get_contact_by_id(contact_id)
        if not contact.category_ids:
            return PagedResponse[Category].empty_page(page_request)

        categories, total = await self.category_db.find_categories(
            page_request, category_name=category_name, category_ids=contact.category_ids
        )
        return PagedResponse[Category].from_page(categories, total, page_request)

    async def add_category_to_contact(self, contact_id: str, category_id: str) -> Contact:
        """
        Assign a category.

        Raises:
            ResourceNotFoundError: If the contact or category does not exist
            ResourceAlreadyExistsError: If the category is already assigned
        """
        tenant_id = get_tenant_id()
        contact = await self.get_contact_by_id(contact_id)

        if not await self.category_db.category_exists(category_id):
            logger.error("category_not_found", tenant_id=tenant_id, category_id=category_id)
            raise ResourceNotFoundError("Category not found")

        if category_id in contact.category_ids:
            logger.debug(
                "category_already_assigned",
                tenant_id=tenant_id,
                contact_id=contact_id,
                category_id=category_id,
            )
            raise ResourceAlreadyExistsError("Category already assigned to contact")

        updated = await self.contact_db.add_category(contact_id, category_id)
        if not updated:
            raise ResourceNotFoundError(f"Contact not found with id: {contact_id}")

        logger.info(
            "added_category_to_contact",
            tenant_id=tenant_id,
            contact_id=contact_id,
            category_id=category_id,
        )
        return updated

    async def remove_category_from_contact(self, contact_id: str, category_id: str) -> None:
        """
        Unassign a category.

        Raises:
            ResourceNotFoundError: If the contact does not exist or lacks the category
        """
        tenant_id = get_tenant_id()
        contact = await self.get_contact_by_id(contact_id)

        if category_id not in contact.category_ids or not await self.contact_db.remove_category(
            contact_id, category_id
        ):
            logger.error(
                "category_not_associated",
                tenant_id=tenant_id,
                contact_id=contact_id,
                category_id=category_id,
            )
            raise ResourceNotFoundError("Category not associated with this contact")

        logger.info(
            "removed_category_from_contact",
            tenant_id=tenant_id,
            contact_id=contact_id,
            category_id=category_id,
        )
