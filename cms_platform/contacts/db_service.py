"""
Contact Database Service

CRUD operations for contacts in the database selected by the router.
"""

import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..exceptions import ResourceAlreadyExistsError
from ..shared_services.database_router import DatabaseRouter
from ..shared_services.pagination import PageRequest
from .models import Contact


class ContactDBService:
    """
    Database service for contacts.

    Every call resolves the collection through the router, so the active
    tenant binding decides which database is read or written.
    """

    def __init__(self, router: DatabaseRouter):
        self.router = router

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.router.current_database()["contacts"]

    async def insert_contact(self, contact: Contact) -> Contact:
        """
        Insert a contact.

        Raises:
            ResourceAlreadyExistsError: If the phone number is already taken
        """
        try:
            await self.collection.insert_one(contact.model_dump())
        except DuplicateKeyError as e:
            raise ResourceAlreadyExistsError(
                f"Contact with phone number {contact.phone} already exists"
            ) from e
        return contact

    async def get_contact_by_id(self, contact_id: str) -> Optional[Contact]:
        contact_dict = await self.collection.find_one({"contact_id": contact_id})
        if contact_dict:
            return Contact(**contact_dict)
        return None

    async def get_contact_by_phone(self, phone: str) -> Optional[Contact]:
        contact_dict = await self.collection.find_one({"phone": phone})
        if contact_dict:
            return Contact(**contact_dict)
        return None

    async def contact_exists(self, contact_id: str) -> bool:
        count = await self.collection.count_documents({"contact_id": contact_id}, limit=1)
        return count > 0

    async def update_contact(self, contact_id: str, update_data: dict) -> Optional[Contact]:
        try:
            result = await self.collection.find_one_and_update(
                {"contact_id": contact_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ResourceAlreadyExistsError(
                f"Contact with phone number {update_data.get('phone')} already exists"
            ) from e
        if result:
            return Contact(**result)
        return None

    async def delete_contact(self, contact_id: str) -> bool:
        result = await self.collection.delete_one({"contact_id": contact_id})
        return result.deleted_count > 0

    async def add_category(self, contact_id: str, category_id: str) -> Optional[Contact]:
        result = await self.collection.find_one_and_update(
            {"contact_id": contact_id},
            {"$addToSet": {"category_ids": category_id}},
            return_document=ReturnDocument.AFTER,
        )
        if result:
            return Contact(**result)
        return None

    async def remove_category(self, contact_id: str, category_id: str) -> bool:
        result = await self.collection.update_one(
            {"contact_id": contact_id},
            {"$pull": {"category_ids": category_id}},
        )
        return result.modified_count > 0

    async def remove_category_from_all(self, category_id: str) -> int:
        """
        Detach a category from every contact.

        Returns:
            Number of contacts modified
        """
        result = await self.collection.update_many(
            {"category_ids": category_id},
            {"$pull": {"category_ids": category_id}},
        )
        return result.modified_count

    async def find_contacts(
        self,
        page_request: PageRequest,
        contact_name: Optional[str] = None,
        phone: Optional[str] = None,
        category_ids: Optional[list[str]] = None,
    ) -> tuple[list[Contact], int]:
        """
        Find contacts matching all given filters.

        Args:
            page_request: Page, size and sort
            contact_name: Case-insensitive substring of the name
            phone: Substring of the phone number
            category_ids: Contact must belong to at least one of these

        Returns:
            Contacts on the page and the total number of matches
        """
        query: dict = {}
        if contact_name:
            query["contact_name"] = {"$regex": re.escape(contact_name), "$options": "i"}
        if phone:
            query["phone"] = {"$regex": re.escape(phone)}
        if category_ids is not None:
            query["category_ids"] = {"$in": category_ids}

        cursor = self.collection.find(
            query,
            sort=page_request.sort_spec(),
            skip=page_request.skip,
            limit=page_request.size,
        )
        contacts = [Contact(**doc) for doc in await cursor.to_list(length=None)]
        total = await self.collection.count_documents(query)

        return contacts, total
