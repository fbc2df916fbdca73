"""
Coffee API - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    ├── service_config: Resolved ServiceConfig pointing at a local MySQL
    ├── database: Database backed by a temporary SQLite file (schema synced)
    ├── test_client: HTTPX AsyncClient bound to a freshly built app
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    └── mock_ssm_client: MagicMock standing in for boto3's SSM client
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Keep tests away from AWS and from any developer .env values
os.environ["USE_PARAMETER_STORE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from coffee_api.config import ServiceConfig  # noqa: E402
from coffee_api.database import Database  # noqa: E402
from coffee_api.main import create_app  # noqa: E402


@pytest.fixture
def service_config():
    """A resolved configuration as the startup orchestrator would build it."""
    return ServiceConfig(
        db_host="localhost",
        db_port=3306,
        db_name="coffee_db",
        db_user="root",
        port=3000,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(tmp_path):
    """
    Provides a real Database on a temporary SQLite file.

    A file (not :memory:) so every pooled connection sees the same tables.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'coffee_test.db'}")
    await db.sync_schema()
    yield db
    await db.dispose()


@pytest.fixture
def app(service_config, database):
    """The wired FastAPI app; tests may set app.dependency_overrides on it."""
    application = create_app(service_config, database)
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalars.return_value.all.return_value = [...]
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_ssm_client():
    """SSM client double; get_parameter answers from a dict of name → value."""
    values = {
        "/prod/rds/coffee/host": "coffee.cluster.rds.amazonaws.com",
        "/prod/rds/coffee/user": "coffee_app",
        "/prod/rds/coffee/password": "s3cr3t",
    }
    client = MagicMock()
    client.values = values

    def get_parameter(Name, WithDecryption=False):
        return {"Parameter": {"Name": Name, "Value": values[Name]}}

    client.get_parameter = MagicMock(side_effect=get_parameter)
    return client
