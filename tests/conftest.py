"""Shared fixtures: in-memory MongoDB, routed services and an HTTP client."""

import httpx
import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from cms_platform.api_gateway.main import create_app, initialize_platform
from cms_platform.shared_services.database_router import DatabaseRouter
from cms_platform.shared_services.tenant_context import clear_tenant_id
from cms_platform.tenant_management.db_service import TenantDBService
from cms_platform.tenant_management.provisioning import TenantProvisioningService
from cms_platform.tenant_management.schema import TenantCreateRequest
from cms_platform.tenant_management.service import TenantService

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin"


@pytest.fixture(autouse=True)
def reset_tenant_binding():
    """Every test starts and ends without a tenant binding."""
    clear_tenant_id()
    yield
    clear_tenant_id()


@pytest.fixture
def mongo_client():
    return AsyncMongoMockClient()


@pytest.fixture
def database_router(mongo_client):
    return DatabaseRouter(mongo_client, default_database_name="default", tenant_db_prefix="tenant_")


@pytest.fixture
def provisioning_service(database_router):
    return TenantProvisioningService(database_router)


@pytest.fixture
def tenant_db_service(database_router):
    return TenantDBService(database_router.default_database())


@pytest.fixture
def tenant_service(tenant_db_service, provisioning_service):
    return TenantService(tenant_db_service, provisioning_service)


@pytest_asyncio.fixture
async def app(mongo_client):
    application = create_app(mongo_client=mongo_client)
    await initialize_platform(application)
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


async def login(client: httpx.AsyncClient, username: str, password: str) -> dict[str, str]:
    """Log in and return the Authorization header."""
    response = await client.post("/auth/token", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest_asyncio.fixture
async def admin_headers(client):
    return await login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


async def create_tenant_via_api(
    client: httpx.AsyncClient,
    admin_headers: dict[str, str],
    username: str,
    password: str = "secret",
    role: str = "USER",
) -> dict:
    response = await client.post(
        "/platform/tenants/",
        json={"name": f"{username} corp", "username": username, "password": password, "role": role},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def acme(client, admin_headers):
    """An ordinary tenant with its login headers."""
    tenant = await create_tenant_via_api(client, admin_headers, "acme")
    headers = await login(client, "acme", "secret")
    return tenant, headers


@pytest_asyncio.fixture
async def globex(client, admin_headers):
    tenant = await create_tenant_via_api(client, admin_headers, "globex")
    headers = await login(client, "globex", "secret")
    return tenant, headers


def user_tenant_request(username: str) -> TenantCreateRequest:
    return TenantCreateRequest(name=f"{username} corp", username=username, password="secret")
