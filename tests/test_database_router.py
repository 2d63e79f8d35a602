"""Tests for per-call database selection."""

import pytest

from cms_platform.shared_services.tenant_context import (
    clear_tenant_id,
    set_tenant_id,
    tenant_scope,
)


def test_bound_tenant_selects_tenant_database(database_router):
    set_tenant_id("abc123")
    assert database_router.current_database_name() == "tenant_abc123"


def test_unbound_selects_default_database(database_router):
    assert database_router.current_database_name() == "default"


def test_resolution_follows_live_binding(database_router):
    """A switch between two calls is honoured; nothing is cached."""
    set_tenant_id("t1")
    assert database_router.current_database_name() == "tenant_t1"

    set_tenant_id("t2")
    assert database_router.current_database_name() == "tenant_t2"

    clear_tenant_id()
    assert database_router.current_database_name() == "default"


def test_tenant_database_name_is_deterministic(database_router):
    assert database_router.tenant_database_name("abc123") == "tenant_abc123"
    assert database_router.tenant_database_name("abc123") == "tenant_abc123"


def test_custom_naming(mongo_client):
    from cms_platform.shared_services.database_router import DatabaseRouter

    router = DatabaseRouter(mongo_client, default_database_name="platform", tenant_db_prefix="t_")

    assert router.current_database_name() == "platform"
    with tenant_scope("x"):
        assert router.current_database_name() == "t_x"


@pytest.mark.asyncio
async def test_writes_land_in_the_bound_database(database_router, mongo_client):
    with tenant_scope("t1"):
        await database_router.current_database()["contacts"].insert_one({"phone": "1"})
    with tenant_scope("t2"):
        await database_router.current_database()["contacts"].insert_one({"phone": "2"})
    await database_router.current_database()["contacts"].insert_one({"phone": "0"})

    assert await mongo_client["tenant_t1"]["contacts"].count_documents({}) == 1
    assert await mongo_client["tenant_t2"]["contacts"].count_documents({}) == 1
    assert await mongo_client["default"]["contacts"].count_documents({}) == 1
    assert await mongo_client["tenant_t1"]["contacts"].find_one({"phone": "2"}) is None


@pytest.mark.asyncio
async def test_explicit_handles_ignore_binding(database_router, mongo_client):
    set_tenant_id("t1")

    await database_router.default_database()["tenants"].insert_one({"tenant_id": "a"})
    await database_router.tenant_database("t9")["categories"].insert_one({"category_id": "c"})

    assert await mongo_client["default"]["tenants"].count_documents({}) == 1
    assert await mongo_client["tenant_t9"]["categories"].count_documents({}) == 1
    assert await mongo_client["tenant_t1"]["tenants"].count_documents({}) == 0
