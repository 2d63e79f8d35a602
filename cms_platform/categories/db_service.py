"""
Category Database Service

CRUD operations for categories in the database selected by the router.
"""

import re
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from ..shared_services.database_router import DatabaseRouter
from ..shared_services.pagination import PageRequest
from .models import Category


class CategoryDBService:
    """Database service for categories, routed per call."""

    def __init__(self, router: DatabaseRouter):
        self.router = router

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.router.current_database()["categories"]

    async def insert_category(self, category: Category) -> Category:
        await self.collection.insert_one(category.model_dump())
        return category

    async def get_category_by_id(self, category_id: str) -> Optional[Category]:
        category_dict = await self.collection.find_one({"category_id": category_id})
        if category_dict:
            return Category(**category_dict)
        return None

    async def category_exists(self, category_id: str) -> bool:
        count = await self.collection.count_documents({"category_id": category_id}, limit=1)
        return count > 0

    async def missing_category_ids(self, category_ids: list[str]) -> list[str]:
        """Return the ids from the list that have no category."""
        cursor = self.collection.find(
            {"category_id": {"$in": category_ids}}, projection={"category_id": True}
        )
        found = {doc["category_id"] for doc in await cursor.to_list(length=None)}
        return [category_id for category_id in category_ids if category_id not in found]

    async def name_exists(self, category_name: str) -> bool:
        """Check case-insensitively whether a category name is taken."""
        count = await self.collection.count_documents(
            {"category_name": {"$regex": f"^{re.escape(category_name)}$", "$options": "i"}},
            limit=1,
        )
        return count > 0

    async def update_category(self, category_id: str, update_data: dict) -> Optional[Category]:
        result = await self.collection.find_one_and_update(
            {"category_id": category_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        if result:
            return Category(**result)
        return None

    async def delete_category(self, category_id: str) -> bool:
        result = await self.collection.delete_one({"category_id": category_id})
        return result.deleted_count > 0

    async def find_category_ids_by_name(self, category_name: str) -> list[str]:
        cursor = self.collection.find(
            {"category_name": {"$regex": re.escape(category_name), "$options": "i"}},
            projection={"category_id": True},
        )
        return [doc["category_id"] for doc in await cursor.to_list(length=None)]

    async def find_categories(
        self,
        page_request: PageRequest,
        category_name: Optional[str] = None,
        category_ids: Optional[list[str]] = None,
    ) -> tuple[list[Category], int]:
        """
        Find categories matching all given filters.

        Args:
            page_request: Page, size and sort
            category_name: Case-insensitive substring of the name
            category_ids: Restrict to these ids

        Returns:
            Categories on the page and the total number of matches
        """
        query: dict = {}
        if category_name:
            query["category_name"] = {"$regex": re.escape(category_name), "$options": "i"}
        if category_ids is not None:
            query["category_id"] = {"$in": category_ids}

        cursor = self.collection.find(
            query,
            sort=page_request.sort_spec(),
            skip=page_request.skip,
            limit=page_request.size,
        )
        categories = [Category(**doc) for doc in await cursor.to_list(length=None)]
        total = await self.collection.count_documents(query)

        return categories, total
