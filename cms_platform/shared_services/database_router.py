"""
Database Router

Selects the MongoDB database for every data-access call from the live
tenant binding. Repositories hold a router instead of a database handle, so
a tenant switch between two calls is always honoured.
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from structlog import get_logger

from ..config import get_config
from .tenant_context import get_tenant_context

config = get_config()
logger = get_logger()


class DatabaseRouter:
    """Resolves logical database names against the current tenant context."""

    def __init__(
        self,
        mongo_client: AsyncIOMotorClient,
        default_database_name: str = config.default_database_name,
        tenant_db_prefix: str = config.tenant_db_prefix,
    ):
        """
        Initialize database router.

        Args:
            mongo_client: MongoDB client shared by all requests
            default_database_name: Database used when no tenant is bound
            tenant_db_prefix: Prefix of per-tenant database names
        """
        self.mongo_client = mongo_client
        self.default_database_name = default_database_name
        self.tenant_db_prefix = tenant_db_prefix

    def tenant_database_name(self, tenant_id: str) -> str:
        """Deterministic database name for a tenant."""
        return f"{self.tenant_db_prefix}{tenant_id}"

    def current_database_name(self) -> str:
        """
        Name of the database for the current operation.

        Returns:
            Tenant database name if a tenant is bound, default name otherwise
        """
        context = get_tenant_context()
        if context is not None:
            database_name = self.tenant_database_name(context.tenant_id)
            logger.debug(
                "using_tenant_database", tenant_id=context.tenant_id, database=database_name
            )
            return database_name

        logger.debug("using_default_database", database=self.default_database_name)
        return self.default_database_name

    def current_database(self) -> AsyncIOMotorDatabase:
        """Database handle for the current operation."""
        return self.mongo_client[self.current_database_name()]

    def default_database(self) -> AsyncIOMotorDatabase:
        """Database handle holding the administrative tenant records."""
        return self.mongo_client[self.default_database_name]

    def tenant_database(self, tenant_id: str) -> AsyncIOMotorDatabase:
        """Database handle for an explicit tenant (lifecycle use only)."""
        return self.mongo_client[self.tenant_database_name(tenant_id)]
