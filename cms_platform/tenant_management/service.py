"""
Tenant Administration Service

Tenant CRUD in the default database. Creating an ordinary tenant provisions
its database; deleting a tenant drops it first. Mutations of one tenant are
serialized so provisioning and deprovisioning never overlap.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import uuid4

from pymongo.errors import PyMongoError
from structlog import get_logger

from ..auth.security import get_password_hash
from ..exceptions import (
    DeprovisioningError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
from ..shared_services.pagination import PagedResponse, PageRequest
from .db_service import TenantDBService
from .models import Tenant, TenantRole
from .provisioning import TenantProvisioningService
from .schema import TenantCreateRequest, TenantUpdateRequest

logger = get_logger()


class TenantLockRegistry:
    """
    One asyncio.Lock per tenant id.

    An entry lives only while some operation holds or awaits the lock, so ids
    that are looked up once (including unknown ones) leave nothing behind.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, tenant_id: str) -> bool:
        return tenant_id in self._locks

    @asynccontextmanager
    async def hold(self, tenant_id: str) -> AsyncIterator[None]:
        """Serialize the enclosed block with every other holder of the same tenant id."""
        lock = self._locks.get(tenant_id)
        if lock is None:
            lock = self._locks[tenant_id] = asyncio.Lock()
        self._holders[tenant_id] = self._holders.get(tenant_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[tenant_id] -= 1
            if not self._holders[tenant_id]:
                del self._holders[tenant_id]
                del self._locks[tenant_id]


class TenantService:
    """Administrative operations on tenants."""

    def __init__(
        self,
        tenant_db_service: TenantDBService,
        provisioning_service: TenantProvisioningService,
        locks: Optional[TenantLockRegistry] = None,
    ):
        """
        Initialize tenant service.

        Args:
            tenant_db_service: Tenant record storage (default database)
            provisioning_service: Tenant database lifecycle
            locks: Shared per-tenant lock registry
        """
        self.tenant_db_service = tenant_db_service
        self.provisioning_service = provisioning_service
        self.locks = locks if locks is not None else TenantLockRegistry()

    def _generate_tenant_id(self) -> str:
        return uuid4().hex

    async def get_all_tenants(
        self, page_request: PageRequest, name: Optional[str] = None
    ) -> PagedResponse[Tenant]:
        logger.debug("fetching_tenants", name=name, page=page_request.page)
        tenants, total = await self.tenant_db_service.list_tenants(page_request, name=name)
        return PagedResponse[Tenant].from_page(tenants, total, page_request)

    async def get_tenant_by_id(self, tenant_id: str) -> Tenant:
        """
        Get a tenant.

        Raises:
            ResourceNotFoundError: If the tenant does not exist
        """
        tenant = await self.tenant_db_service.get_tenant_by_id(tenant_id)
        if not tenant:
            logger.error("tenant_not_found", tenant_id=tenant_id)
            raise ResourceNotFoundError(f"Tenant not found with id: {tenant_id}")
        return tenant

    async def create_tenant(self, request: TenantCreateRequest) -> Tenant:
        """
        Create a tenant and, unless it is an administrator, its database.

        Args:
            request: Tenant creation request

        Returns:
            Created tenant

        Raises:
            ResourceAlreadyExistsError: If the username is taken
            ProvisioningError: If the tenant database could not be created;
                neither the record nor a partial database is left behind
        """
        logger.info("creating_tenant", name=request.name, username=request.username)

        if await self.tenant_db_service.username_exists(request.username):
            logger.error("tenant_username_taken", username=request.username)
            raise ResourceAlreadyExistsError(f"Username already exists: {request.username}")

        tenant_id = self._generate_tenant_id()
        is_admin = request.role == TenantRole.ADMIN
        router = self.provisioning_service.router
        tenant = Tenant(
            tenant_id=tenant_id,
            name=request.name,
            description=request.description,
            username=request.username,
            hashed_password=get_password_hash(request.password),
            role=request.role,
            database_name=None if is_admin else router.tenant_database_name(tenant_id),
        )

        async with self.locks.hold(tenant_id):
            await self.tenant_db_service.create_tenant(tenant)
            logger.info("created_tenant_record", tenant_id=tenant_id)

            if is_admin:
                logger.info("skipping_provisioning_for_admin", tenant_id=tenant_id)
                return tenant

            try:
                await self.provisioning_service.provision_tenant_database(tenant_id)
            except BaseException as e:
                # Includes cancellation: the tenant must not exist without its database
                await self._rollback_creation(tenant_id, e)
                raise

        return tenant

    async def _rollback_creation(self, tenant_id: str, error: BaseException) -> None:
        """
        Undo a tenant creation whose provisioning did not complete.

        Cleanup failures are logged and never replace the original error.

        Args:
            tenant_id: Tenant whose record was already inserted
            error: The failure that interrupted provisioning
        """
        logger.error(
            "tenant_provisioning_interrupted",
            tenant_id=tenant_id,
            error_type=type(error).__name__,
            error=str(error),
        )

        try:
            await self.provisioning_service.deprovision_tenant_database(tenant_id)
        except DeprovisioningError as e:
            logger.error("tenant_rollback_drop_failed", tenant_id=tenant_id, error=e.message)

        try:
            await self.tenant_db_service.hard_delete_tenant(tenant_id)
        except PyMongoError as e:
            logger.error("tenant_rollback_delete_failed", tenant_id=tenant_id, error=str(e))
            return

        logger.error("tenant_creation_rolled_back", tenant_id=tenant_id)

    async def update_tenant(self, tenant_id: str, request: TenantUpdateRequest) -> Tenant:
        """
        Update name and description.

        Raises:
            ResourceNotFoundError: If the tenant does not exist
            ResourceAlreadyExistsError: If the new name is taken
        """
        async with self.locks.hold(tenant_id):
            existing = await self.get_tenant_by_id(tenant_id)

            update_data = {}
            if request.name is not None and request.name != existing.name:
                if await self.tenant_db_service.name_exists(request.name):
                    logger.error("tenant_name_taken", name=request.name)
                    raise ResourceAlreadyExistsError(
                        f"Tenant with name: {request.name} already exists"
                    )
                update_data["name"] = request.name
            if request.description is not None:
                update_data["description"] = request.description

            if not update_data:
                return existing

            updated = await self.tenant_db_service.update_tenant(tenant_id, update_data)
            if not updated:
                raise ResourceNotFoundError(f"Tenant not found with id: {tenant_id}")

        logger.info("updated_tenant", tenant_id=tenant_id, fields=sorted(update_data))
        return updated

    async def delete_tenant(self, tenant_id: str) -> None:
        """
        Drop the tenant database, then remove the tenant record.

        Raises:
            ResourceNotFoundError: If the tenant does not exist
            DeprovisioningError: If the database drop failed; the record is kept
        """
        logger.info("deleting_tenant", tenant_id=tenant_id)

        async with self.locks.hold(tenant_id):
            tenant = await self.get_tenant_by_id(tenant_id)

            if not tenant.is_admin:
                try:
                    await self.provisioning_service.deprovision_tenant_database(tenant_id)
                except DeprovisioningError:
                    logger.error("tenant_deletion_aborted", tenant_id=tenant_id)
                    raise

            await self.tenant_db_service.hard_delete_tenant(tenant_id)

        logger.info("deleted_tenant", tenant_id=tenant_id)

    async def ensure_admin(self, username: str, password: str, name: str) -> Tenant:
        """
        Create the bootstrap administrator if the username is free.

        Returns:
            The existing or newly created administrator
        """
        existing = await self.tenant_db_service.get_tenant_by_username(username)
        if existing:
            return existing

        logger.info("creating_bootstrap_admin", username=username)
        return await self.create_tenant(
            TenantCreateRequest(
                name=name,
                description="System administrator account",
                username=username,
                password=password,
                role=TenantRole.ADMIN,
            )
        )
