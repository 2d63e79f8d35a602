"""Tests for the contact repository against a provisioned tenant database."""

import pytest

from cms_platform.contacts.db_service import ContactDBService
from cms_platform.contacts.models import Contact
from cms_platform.exceptions import ResourceAlreadyExistsError
from cms_platform.shared_services.tenant_context import tenant_scope


@pytest.fixture
def contact_db(database_router):
    return ContactDBService(database_router)


@pytest.mark.asyncio
async def test_duplicate_phone_insert_maps_to_conflict(provisioning_service, contact_db):
    await provisioning_service.provision_tenant_database("t1")

    with tenant_scope("t1"):
        await contact_db.insert_contact(Contact(contact_id="c1", contact_name="Jane", phone="1"))

        with pytest.raises(ResourceAlreadyExistsError):
            await contact_db.insert_contact(
                Contact(contact_id="c2", contact_name="John", phone="1")
            )


@pytest.mark.asyncio
async def test_duplicate_phone_update_maps_to_conflict(provisioning_service, contact_db):
    await provisioning_service.provision_tenant_database("t1")

    with tenant_scope("t1"):
        await contact_db.insert_contact(Contact(contact_id="c1", contact_name="Jane", phone="1"))
        await contact_db.insert_contact(Contact(contact_id="c2", contact_name="John", phone="2"))

        with pytest.raises(ResourceAlreadyExistsError):
            await contact_db.update_contact("c2", {"phone": "1"})

        unchanged = await contact_db.get_contact_by_id("c2")
        assert unchanged.phone == "2"


@pytest.mark.asyncio
async def test_same_phone_allowed_in_other_tenant(provisioning_service, contact_db):
    for tenant_id in ("t1", "t2"):
        await provisioning_service.provision_tenant_database(tenant_id)
        with tenant_scope(tenant_id):
            await contact_db.insert_contact(
                Contact(contact_id="c1", contact_name="Jane", phone="1")
            )

    with tenant_scope("t2"):
        assert (await contact_db.get_contact_by_phone("1")).contact_id == "c1"
