"""
Tenant Database Service

Handles database operations for tenant records in the default database.
"""

import re
from datetime import datetime
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..exceptions import ResourceAlreadyExistsError
from ..shared_services.pagination import PageRequest
from .models import Tenant


class TenantDBService:
    """
    Database service for tenant management.

    Operates on the default database, never on tenant-specific databases.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize tenant database service.

        Args:
            db: Default database instance
        """
        self.db = db
        self.collection = self.db["tenants"]

    async def ensure_indexes(self) -> None:
        """Create necessary indexes for tenant collection."""
        indexes = [
            IndexModel([("tenant_id", ASCENDING)], unique=True),
            IndexModel([("username", ASCENDING)], unique=True),
            IndexModel([("name", ASCENDING)]),
            IndexModel([("created_at", ASCENDING)]),
        ]
        await self.collection.create_indexes(indexes)

    async def create_tenant(self, tenant: Tenant) -> Tenant:
        """
        Create a new tenant record.

        Args:
            tenant: Tenant object to create

        Returns:
            Created tenant

        Raises:
            ResourceAlreadyExistsError: If tenant_id or username already exists
        """
        tenant_dict = tenant.model_dump()

        try:
            await self.collection.insert_one(tenant_dict)
            return tenant
        except DuplicateKeyError as e:
            if "username" in str(e):
                raise ResourceAlreadyExistsError(
                    f"Username already exists: {tenant.username}"
                )
            raise ResourceAlreadyExistsError(
                f"Tenant with ID '{tenant.tenant_id}' already exists"
            )

    async def get_tenant_by_id(self, tenant_id: str) -> Optional[Tenant]:
        """
        Get tenant by ID.

        Args:
            tenant_id: Tenant identifier

        Returns:
            Tenant if found, None otherwise
        """
        tenant_dict = await self.collection.find_one({"tenant_id": tenant_id})
        if tenant_dict:
            return Tenant(**tenant_dict)
        return None

    async def get_tenant_by_username(self, username: str) -> Optional[Tenant]:
        """
        Get tenant by login name.

        Args:
            username: Login name

        Returns:
            Tenant if found, None otherwise
        """
        tenant_dict = await self.collection.find_one({"username": username})
        if tenant_dict:
            return Tenant(**tenant_dict)
        return None

    async def update_tenant(self, tenant_id: str, update_data: dict) -> Optional[Tenant]:
        """
        Update tenant information.

        Args:
            tenant_id: Tenant identifier
            update_data: Dictionary of fields to update

        Returns:
            Updated tenant if found, None otherwise
        """
        update_data["updated_at"] = datetime.utcnow()

        result = await self.collection.find_one_and_update(
            {"tenant_id": tenant_id},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )

        if result:
            return Tenant(**result)
        return None

    async def list_tenants(
        self, page_request: PageRequest, name: Optional[str] = None
    ) -> tuple[list[Tenant], int]:
        """
        List tenants with optional name filtering.

        Args:
            page_request: Page, size and sort
            name: Case-insensitive substring of the tenant name

        Returns:
            Tenants on the page and the total number of matches
        """
        query = {}
        if name:
            query["name"] = {"$regex": re.escape(name), "$options": "i"}

        cursor = self.collection.find(
            query,
            sort=page_request.sort_spec(),
            skip=page_request.skip,
            limit=page_request.size,
        )
        tenants = [Tenant(**tenant_dict) for tenant_dict in await cursor.to_list(length=None)]
        total = await self.collection.count_documents(query)

        return tenants, total

    async def count_tenants(self) -> int:
        """Count all tenant records."""
        return await self.collection.count_documents({})

    async def hard_delete_tenant(self, tenant_id: str) -> bool:
        """
        Permanently delete a tenant record.

        WARNING: This is irreversible. Use with caution.

        Args:
            tenant_id: Tenant identifier

        Returns:
            True if deleted, False if not found
        """
        result = await self.collection.delete_one({"tenant_id": tenant_id})
        return result.deleted_count > 0

    async def username_exists(self, username: str) -> bool:
        """
        Check if a login name is taken.

        Args:
            username: Login name to check

        Returns:
            True if taken, False otherwise
        """
        count = await self.collection.count_documents({"username": username}, limit=1)
        return count > 0

    async def name_exists(self, name: str) -> bool:
        """Check case-insensitively whether a tenant name is taken."""
        count = await self.collection.count_documents(
            {"name": {"$regex": f"^{re.escape(name)}$", "$options": "i"}}, limit=1
        )
        return count > 0
