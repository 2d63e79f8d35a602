"""Tests for the tenant interceptor: binding, routing and cleanup."""

import asyncio
from types import SimpleNamespace

import pytest
import pytest_asyncio
from fastapi import HTTPException, Request
from starlette.requests import Request as StarletteRequest

from cms_platform.auth.models import ANONYMOUS_PRINCIPAL, Principal
from cms_platform.shared_services import tenant_middleware
from cms_platform.shared_services.database_router import DatabaseRouter
from cms_platform.shared_services.tenant_context import get_tenant_id, set_tenant_id
from cms_platform.shared_services.tenant_middleware import TenantInterceptorMiddleware
from cms_platform.tenant_management.models import TenantRole


async def _noop_app(scope, receive, send):
    pass


def _request(path: str, router: DatabaseRouter) -> StarletteRequest:
    app = SimpleNamespace(state=SimpleNamespace(database_router=router))
    return StarletteRequest(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "headers": [],
            "query_string": b"",
            "app": app,
        }
    )


def _principal(tenant_id: str, role: TenantRole) -> Principal:
    return Principal(tenant_id=tenant_id, username=f"user-{tenant_id}", role=role)


@pytest.fixture
def middleware():
    return TenantInterceptorMiddleware(_noop_app, include_paths=["/"], exclude_paths=["/health"])


@pytest.fixture
def resolve_as(monkeypatch):
    def _resolve_as(principal: Principal):
        async def fake_resolve(request):
            return principal

        monkeypatch.setattr(tenant_middleware, "resolve_principal", fake_resolve)

    return _resolve_as


@pytest.mark.asyncio
async def test_user_request_routes_to_tenant_database(middleware, resolve_as, database_router):
    resolve_as(_principal("abc123", TenantRole.USER))
    seen = {}

    async def call_next(request):
        seen["tenant_id"] = get_tenant_id()
        seen["database"] = database_router.current_database_name()
        return "response"

    result = await middleware.dispatch(_request("/contacts/", database_router), call_next)

    assert result == "response"
    assert seen == {"tenant_id": "abc123", "database": "tenant_abc123"}
    assert get_tenant_id() is None


@pytest.mark.asyncio
async def test_admin_with_stale_binding_uses_default(middleware, resolve_as, database_router):
    set_tenant_id("abc123")
    resolve_as(_principal("root", TenantRole.ADMIN))
    seen = {}

    async def call_next(request):
        seen["tenant_id"] = get_tenant_id()
        seen["database"] = database_router.current_database_name()
        return "response"

    await middleware.dispatch(_request("/platform/tenants/", database_router), call_next)

    assert seen == {"tenant_id": None, "database": "default"}
    assert get_tenant_id() is None


@pytest.mark.asyncio
async def test_anonymous_request_is_rejected(middleware, resolve_as, database_router):
    resolve_as(ANONYMOUS_PRINCIPAL)

    async def call_next(request):
        raise AssertionError("handler must not run")

    response = await middleware.dispatch(_request("/contacts/", database_router), call_next)

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert get_tenant_id() is None


@pytest.mark.asyncio
async def test_binding_cleared_after_handler_error(middleware, resolve_as, database_router):
    resolve_as(_principal("t1", TenantRole.USER))

    async def call_next(request):
        assert get_tenant_id() == "t1"
        raise RuntimeError("handler crashed")

    with pytest.raises(RuntimeError):
        await middleware.dispatch(_request("/contacts/", database_router), call_next)

    assert get_tenant_id() is None


@pytest.mark.asyncio
async def test_binding_cleared_after_cancellation(middleware, resolve_as, database_router):
    resolve_as(_principal("t1", TenantRole.USER))

    async def call_next(request):
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await middleware.dispatch(_request("/contacts/", database_router), call_next)

    assert get_tenant_id() is None


@pytest.mark.asyncio
async def test_excluded_path_is_not_intercepted(middleware, resolve_as, database_router):
    resolve_as(_principal("t1", TenantRole.USER))
    seen = {}

    async def call_next(request):
        seen["tenant_id"] = get_tenant_id()
        return "response"

    await middleware.dispatch(_request("/health", database_router), call_next)

    assert seen == {"tenant_id": None}


@pytest.mark.parametrize(
    "path,intercepted",
    [
        ("/contacts/", True),
        ("/health", False),
        ("/health/live", False),
        ("/healthz", True),
        ("/auth/token", False),
        ("/auth/me", True),
        ("/docs", False),
    ],
)
def test_path_matching(path, intercepted):
    middleware = TenantInterceptorMiddleware(
        _noop_app,
        include_paths=["/"],
        exclude_paths=["/health", "/auth/token", "/docs"],
    )
    assert middleware._is_intercepted(path) is intercepted


def test_include_prefixes_limit_interception():
    middleware = TenantInterceptorMiddleware(
        _noop_app, include_paths=["/contacts", "/categories/"], exclude_paths=[]
    )

    assert middleware._is_intercepted("/contacts")
    assert middleware._is_intercepted("/categories/abc")
    assert not middleware._is_intercepted("/platform/tenants")


@pytest_asyncio.fixture
async def routing_app(app):
    """Application with extra routes exposing the routing decision."""

    @app.get("/routing/database")
    async def routing_database(request: Request):
        await asyncio.sleep(0.01)
        return {
            "tenant_id": get_tenant_id(),
            "database": request.app.state.database_router.current_database_name(),
        }

    @app.get("/routing/http-error")
    async def routing_http_error():
        raise HTTPException(status_code=418, detail="teapot")

    @app.get("/routing/crash")
    async def routing_crash():
        raise RuntimeError("boom")

    return app


@pytest.mark.asyncio
async def test_protected_path_requires_token(client):
    response = await client.get("/contacts/")

    assert response.status_code == 401
    assert response.json() == {"detail": "Authentication required"}


@pytest.mark.asyncio
async def test_invalid_token_is_anonymous(client):
    response = await client.get("/contacts/", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_public_paths_need_no_token(client):
    assert (await client.get("/health")).status_code == 200
    assert (await client.get("/ping")).json() == {"message": "pong"}


@pytest.mark.asyncio
async def test_request_routes_to_callers_database(routing_app, client, acme, admin_headers):
    tenant, headers = acme

    user_view = (await client.get("/routing/database", headers=headers)).json()
    admin_view = (await client.get("/routing/database", headers=admin_headers)).json()

    assert user_view == {
        "tenant_id": tenant["tenant_id"],
        "database": f"tenant_{tenant['tenant_id']}",
    }
    assert admin_view == {"tenant_id": None, "database": "default"}


@pytest.mark.asyncio
async def test_admin_request_ignores_stale_binding(routing_app, client, admin_headers):
    set_tenant_id("abc123")

    response = await client.get("/routing/database", headers=admin_headers)

    assert response.json() == {"tenant_id": None, "database": "default"}
    assert get_tenant_id() is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,status_code",
    [("/routing/database", 200), ("/routing/http-error", 418), ("/routing/crash", 500)],
)
async def test_binding_cleared_whatever_the_outcome(routing_app, client, acme, path, status_code):
    _, headers = acme

    response = await client.get(path, headers=headers)

    assert response.status_code == status_code
    assert get_tenant_id() is None


@pytest.mark.asyncio
async def test_concurrent_requests_are_isolated(routing_app, client, acme, globex):
    acme_tenant, acme_headers = acme
    globex_tenant, globex_headers = globex

    responses = await asyncio.gather(
        *[
            client.get("/routing/database", headers=headers)
            for headers in (acme_headers, globex_headers) * 5
        ]
    )

    databases = [response.json()["database"] for response in responses]
    assert databases == [
        f"tenant_{acme_tenant['tenant_id']}",
        f"tenant_{globex_tenant['tenant_id']}",
    ] * 5


@pytest.mark.asyncio
async def test_admin_cannot_use_tenant_routes(client, admin_headers):
    response = await client.get("/contacts/", headers=admin_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_user_cannot_administer_tenants(client, acme):
    _, headers = acme

    response = await client.get("/platform/tenants/", headers=headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_deleted_tenant_loses_access(client, acme, admin_headers):
    tenant, headers = acme

    response = await client.delete(f"/platform/tenants/{tenant['tenant_id']}", headers=admin_headers)
    assert response.status_code == 204

    response = await client.get("/contacts/", headers=headers)
    assert response.status_code == 401
