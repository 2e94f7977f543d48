from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from permit_buddy.database.models import Jurisdiction, User
from permit_buddy.repositories.lookup_repository import LookupRepository
from permit_buddy.repositories.user_repository import UserRepository


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()
    return session


class TestLookupRepository:

    @pytest.mark.asyncio
    async def test_blank_label_resolves_to_none(self, session):
        repository = LookupRepository(session, Jurisdiction)

        assert await repository.resolve("   ") is None
        assert await repository.resolve(None) is None
        session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_row_is_reused(self, session):
        repository = LookupRepository(session, Jurisdiction)
        existing = Jurisdiction(id=4, name="Austin, TX")

        with patch.object(repository, "find_by_name", AsyncMock(return_value=existing)) as mock_find, \
                patch.object(repository, "create", AsyncMock()) as mock_create:
            assert await repository.resolve("  Austin, TX ") is existing

        mock_find.assert_awaited_once_with("Austin, TX")
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_row_is_created(self, session):
        repository = LookupRepository(session, Jurisdiction)
        created = Jurisdiction(id=9, name="Travis County")

        with patch.object(repository, "find_by_name", AsyncMock(return_value=None)), \
                patch.object(repository, "create", AsyncMock(return_value=created)) as mock_create:
            assert await repository.find_or_create("Travis County") is created

        mock_create.assert_awaited_once_with(name="Travis County")

    @pytest.mark.asyncio
    async def test_database_errors_propagate(self, session):
        repository = LookupRepository(session, Jurisdiction)
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection reset"))

        with pytest.raises(OperationalError):
            await repository.find_by_name("Austin, TX")


class TestUpsertIdentity:

    @pytest.mark.asyncio
    async def test_creates_missing_user(self, session):
        repository = UserRepository(session)

        with patch.object(repository, "get_by_id", AsyncMock(return_value=None)), \
                patch.object(repository, "create", AsyncMock()) as mock_create:
            await repository.upsert_identity("u1", "rosa@example.com", "Rosa")

        mock_create.assert_awaited_once_with(id="u1", email="rosa@example.com", name="Rosa")

    @pytest.mark.asyncio
    async def test_unchanged_identity_is_not_written(self, session):
        repository = UserRepository(session)
        user = User(id="u1", email="rosa@example.com", name="Rosa")

        with patch.object(repository, "get_by_id", AsyncMock(return_value=user)), \
                patch.object(repository, "apply_update", AsyncMock()) as mock_update:
            assert await repository.upsert_identity("u1", "rosa@example.com", "Rosa") is user

        mock_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_changed_identity_overwrites_name_and_email(self, session):
        repository = UserRepository(session)
        user = User(id="u1", email="old@example.com", name="Rosa M.")

        with patch.object(repository, "get_by_id", AsyncMock(return_value=user)), \
                patch.object(repository, "apply_update", AsyncMock(return_value=user)) as mock_update:
            await repository.upsert_identity("u1", "rosa@example.com", "Rosa")

        mock_update.assert_awaited_once_with(user, email="rosa@example.com", name="Rosa")
