from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from permit_buddy.core.exceptions import NotFoundError, ValidationError
from permit_buddy.database.models import Business, BusinessDocument, BusinessType, Jurisdiction
from permit_buddy.schemas.business import BusinessPayload
from permit_buddy.services.business_service import BusinessService

USER_ID = "user-1"
NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


def make_business(**values) -> Business:
    defaults = dict(id=7, user_id=USER_ID, name="Rosa's Tacos", created_at=NOW, updated_at=NOW)
    defaults.update(values)
    return Business(**defaults)


@pytest.fixture
def service() -> BusinessService:
    service = BusinessService(MagicMock())
    service.repository = AsyncMock()
    service.business_types = AsyncMock()
    service.jurisdictions = AsyncMock()
    service.business_types.resolve.return_value = None
    service.jurisdictions.resolve.return_value = None
    return service


@pytest.mark.asyncio
async def test_create_business_links_lookups(service):
    service.business_types.resolve.return_value = BusinessType(id=3, name="Food Truck")
    service.jurisdictions.resolve.return_value = Jurisdiction(id=4, name="Austin, TX")
    service.repository.create.side_effect = lambda **kwargs: make_business(**kwargs)

    result = await service.create_business(
        USER_ID,
        BusinessPayload(name="  Rosa's Tacos ", phone="  ", business_type_name="Food Truck", jurisdiction_name="Austin, TX"),
    )

    kwargs = service.repository.create.call_args.kwargs
    assert kwargs["name"] == "Rosa's Tacos"
    assert kwargs["phone"] is None
    assert kwargs["business_type_id"] == 3
    assert kwargs["jurisdiction_id"] == 4
    assert result.user_id == USER_ID


@pytest.mark.asyncio
async def test_create_business_requires_name(service):
    with pytest.raises(ValidationError, match="Company name is required"):
        await service.create_business(USER_ID, BusinessPayload(name="   "))

    service.repository.create.assert_not_called()


@pytest.mark.asyncio
async def test_update_business_of_another_user_is_not_found(service):
    service.repository.get_for_user.return_value = None

    with pytest.raises(NotFoundError, match="Company not found"):
        await service.update_business(USER_ID, 99, BusinessPayload(name="Taken Over"))

    service.repository.get_for_user.assert_awaited_once_with(99, USER_ID)
    service.repository.apply_update.assert_not_called()


@pytest.mark.asyncio
async def test_update_business_blank_labels_clear_links(service):
    business = make_business(business_type_id=3, jurisdiction_id=4)
    service.repository.get_for_user.return_value = business
    service.repository.apply_update.side_effect = lambda instance, **kwargs: make_business(**kwargs)

    await service.update_business(USER_ID, 7, BusinessPayload(name="Rosa's Tacos", business_type_name=""))

    kwargs = service.repository.apply_update.call_args.kwargs
    assert kwargs["business_type_id"] is None
    assert kwargs["jurisdiction_id"] is None


@pytest.mark.asyncio
async def test_delete_business_checks_ownership(service):
    service.repository.get_for_user.return_value = None

    with pytest.raises(NotFoundError):
        await service.delete_business(USER_ID, 7)

    service.repository.delete.assert_not_called()


@pytest.mark.asyncio
async def test_delete_business(service):
    service.repository.get_for_user.return_value = make_business()

    await service.delete_business(USER_ID, 7)

    service.repository.delete.assert_awaited_once_with(7)


def test_deleting_business_removes_its_documents():
    (foreign_key,) = BusinessDocument.__table__.c.business_id.foreign_keys
    assert foreign_key.column.table.name == "businesses"
    assert foreign_key.ondelete == "CASCADE"

    documents = Business.documents.property
    assert documents.cascade.delete
    assert documents.cascade.delete_orphan
    assert documents.passive_deletes is True
