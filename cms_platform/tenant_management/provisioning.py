"""
Tenant Provisioning Service

Creates and destroys the per-tenant MongoDB database:
1. Derive the database name from the tenant identifier
2. Create the contacts and categories collections if absent
3. Create their uniqueness indexes
4. Drop the whole database when the tenant is deleted
"""

from pymongo import ASCENDING, IndexModel
from pymongo.errors import CollectionInvalid, PyMongoError
from structlog import get_logger

from ..exceptions import DeprovisioningError, ProvisioningError
from ..shared_services.database_router import DatabaseRouter

logger = get_logger()

# Collections every tenant database must contain, with their indexes
TENANT_COLLECTIONS: dict[str, list[IndexModel]] = {
    "contacts": [
        IndexModel([("contact_id", ASCENDING)], unique=True),
        IndexModel([("phone", ASCENDING)], unique=True),
        IndexModel([("category_ids", ASCENDING)]),
    ],
    "categories": [
        IndexModel([("category_id", ASCENDING)], unique=True),
        IndexModel([("category_name", ASCENDING)]),
    ],
}


class TenantProvisioningService:
    """Service for provisioning and deprovisioning tenant databases."""

    def __init__(self, router: DatabaseRouter):
        """
        Initialize provisioning service.

        Args:
            router: Database router owning the MongoDB client and naming scheme
        """
        self.router = router
        self.mongo_client = router.mongo_client

    async def provision_tenant_database(self, tenant_id: str) -> str:
        """
        Create the tenant database and its collections.

        Idempotent: existing collections are left untouched.

        Args:
            tenant_id: Tenant identifier

        Returns:
            Name of the provisioned database

        Raises:
            ProvisioningError: If the database or a collection cannot be created
        """
        database_name = self.router.tenant_database_name(tenant_id)
        logger.info("starting_tenant_provisioning", tenant_id=tenant_id, database=database_name)

        tenant_db = self.router.tenant_database(tenant_id)

        try:
            existing = set(await tenant_db.list_collection_names())

            for collection_name, indexes in TENANT_COLLECTIONS.items():
                if collection_name in existing:
                    logger.debug(
                        "tenant_collection_exists",
                        database=database_name,
                        collection=collection_name,
                    )
                    continue

                try:
                    await tenant_db.create_collection(collection_name)
                except CollectionInvalid:
                    # Created concurrently between the listing and now
                    logger.debug(
                        "tenant_collection_exists",
                        database=database_name,
                        collection=collection_name,
                    )
                    continue

                await tenant_db[collection_name].create_indexes(indexes)
                logger.info(
                    "tenant_collection_created",
                    database=database_name,
                    collection=collection_name,
                )
        except PyMongoError as e:
            logger.error(
                "failed_to_provision_tenant_database",
                tenant_id=tenant_id,
                database=database_name,
                error=str(e),
            )
            raise ProvisioningError(
                f"Failed to provision database {database_name}: {e}", tenant_id=tenant_id
            ) from e

        logger.info("tenant_provisioning_completed", tenant_id=tenant_id, database=database_name)
        return database_name

    async def deprovision_tenant_database(self, tenant_id: str) -> None:
        """
        Irreversibly drop the tenant database.

        Args:
            tenant_id: Tenant identifier

        Raises:
            DeprovisioningError: If the drop fails
        """
        database_name = self.router.tenant_database_name(tenant_id)
        logger.info("dropping_tenant_database", tenant_id=tenant_id, database=database_name)

        try:
            await self.mongo_client.drop_database(database_name)
        except PyMongoError as e:
            logger.error(
                "failed_to_drop_tenant_database",
                tenant_id=tenant_id,
                database=database_name,
                error=str(e),
            )
            raise DeprovisioningError(
                f"Failed to drop database {database_name}: {e}", tenant_id=tenant_id
            ) from e

        logger.warning("tenant_database_deleted", tenant_id=tenant_id, database=database_name)

    async def database_exists(self, tenant_id: str) -> bool:
        """
        Check whether the tenant database exists.

        Args:
            tenant_id: Tenant identifier

        Returns:
            True if the server lists the database
        """
        database_name = self.router.tenant_database_name(tenant_id)
        return database_name in await self.mongo_client.list_database_names()

    async def list_collections(self, tenant_id: str) -> list[str]:
        """List collection names in the tenant database."""
        return sorted(await self.router.tenant_database(tenant_id).list_collection_names())
