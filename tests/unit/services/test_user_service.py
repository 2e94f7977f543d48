from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from permit_buddy.core.exceptions import NotFoundError, ValidationError
from permit_buddy.database.models import User
from permit_buddy.schemas.auth import CurrentUser
from permit_buddy.schemas.profile import ProfileUpdate
from permit_buddy.services.user_service import FALLBACK_DISPLAY_NAME, UserService, resolve_display_name

NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


class TestResolveDisplayName:

    def test_full_name_wins(self):
        user = CurrentUser(id="u1", email="rosa@example.com", user_metadata={"full_name": "Rosa Martinez", "name": "Rosa"})
        assert resolve_display_name(user) == "Rosa Martinez"

    def test_name_metadata(self):
        user = CurrentUser(id="u1", email="rosa@example.com", user_metadata={"full_name": "  ", "name": "Rosa"})
        assert resolve_display_name(user) == "Rosa"

    def test_email_local_part(self):
        user = CurrentUser(id="u1", email="rosa.m@example.com")
        assert resolve_display_name(user) == "Rosa.m"

    def test_fallback(self):
        assert resolve_display_name(CurrentUser(id="u1")) == FALLBACK_DISPLAY_NAME


@pytest.fixture
def service() -> UserService:
    service = UserService(MagicMock())
    service.repository = AsyncMock()
    return service


@pytest.mark.asyncio
async def test_ensure_user_upserts_identity(service):
    current_user = CurrentUser(id="u1", email="rosa@example.com", user_metadata={"full_name": "Rosa Martinez"})

    await service.ensure_user(current_user)

    service.repository.upsert_identity.assert_awaited_once_with(
        user_id="u1", email="rosa@example.com", name="Rosa Martinez"
    )


@pytest.mark.asyncio
async def test_update_profile_trims_and_clears_phone(service):
    service.repository.update.return_value = User(
        id="u1", email="rosa@example.com", name="Rosa", phone=None, created_at=NOW, updated_at=NOW
    )

    profile = await service.update_profile(
        CurrentUser(id="u1", email="rosa@example.com"),
        ProfileUpdate(name="  Rosa ", phone="   "),
    )

    service.repository.update.assert_awaited_once_with("u1", name="Rosa", phone=None, email="rosa@example.com")
    assert profile.name == "Rosa"
    assert profile.phone is None


@pytest.mark.asyncio
async def test_update_profile_requires_name(service):
    with pytest.raises(ValidationError, match="Name is required"):
        await service.update_profile(CurrentUser(id="u1"), ProfileUpdate(name=" "))

    service.repository.update.assert_not_called()


@pytest.mark.asyncio
async def test_update_profile_missing_row(service):
    service.repository.update.return_value = None

    with pytest.raises(NotFoundError):
        await service.update_profile(CurrentUser(id="u1", email="rosa@example.com"), ProfileUpdate(name="Rosa"))
