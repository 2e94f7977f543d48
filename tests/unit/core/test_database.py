from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from permit_buddy.core.config import DatabaseSettings
from permit_buddy.core.database import DatabaseClient, db_client, init_database


class TestConnectionUrl:

    def test_hosted_url_gets_asyncpg_driver(self):
        settings = DatabaseSettings(DATABASE_URL="postgres://u:p@db.example.com:6543/postgres?sslmode=require&supa=base-pooler.x")
        assert settings.connection_url == "postgresql+asyncpg://u:p@db.example.com:6543/postgres?ssl=require"

    def test_plain_postgresql_url(self):
        settings = DatabaseSettings(DATABASE_URL="postgresql://u:p@localhost/permits")
        assert settings.connection_url == "postgresql+asyncpg://u:p@localhost/permits"

    def test_driver_url_is_left_alone(self):
        url = "postgresql+asyncpg://u:p@localhost/permits"
        assert DatabaseSettings(DATABASE_URL=url).connection_url == url


def engine_with_connection(connection) -> MagicMock:
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=connection)
    context.__aexit__ = AsyncMock(return_value=False)
    engine = MagicMock()
    engine.connect.return_value = context
    return engine


@pytest.mark.asyncio
async def test_health_check_healthy():
    connection = MagicMock()
    connection.scalar = AsyncMock(return_value=1)
    client = DatabaseClient(engine_with_connection(connection))

    result = await client.health_check()

    assert result["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_check_unreachable():
    engine = MagicMock()
    engine.connect.side_effect = OSError("connection refused")
    client = DatabaseClient(engine)

    result = await client.health_check()

    assert result == {"status": "unhealthy", "connected": False, "error": "connection refused"}


@pytest.mark.asyncio
@pytest.mark.parametrize("auto_migrate, creates", [(True, 1), (False, 0)])
async def test_init_database_creates_tables_only_when_asked(auto_migrate, creates):
    with patch.object(db_client, "connect", new_callable=AsyncMock) as mock_connect, \
            patch.object(db_client, "create_tables", new_callable=AsyncMock) as mock_create:
        await init_database(auto_migrate=auto_migrate)

    mock_connect.assert_awaited_once()
    assert mock_create.await_count == creates
