"""
RondaGuard Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database: real Database on a throwaway SQLite file, schema created
    ├── mock_database: Database stand-in whose transaction() yields a mock session
    ├── sample_template / sample_task / sample_round / sample_user: wire payloads
    └── test_client: HTTPX AsyncClient bound to an app using `database`
"""

import os

# Override settings for testing BEFORE any rondaguard import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["BCRYPT_ROUNDS"] = "4"  # Fast hashing

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from rondaguard.database import Database


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def database(tmp_path):
    """
    Provides a real Database backed by a fresh SQLite file.

    The upsert engine and reader run real SQL against it, so atomicity and
    ordering are checked end to end.
    """
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'rondaguard_test.db'}")
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def mock_database():
    """
    Provides a Database stand-in with a mock transactional session.

    Usage:
        async def test_no_write(mock_database):
            ...
            mock_database.session.execute.assert_not_awaited()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()

    @asynccontextmanager
    async def _session():
        yield session

    db = MagicMock(spec=Database)
    db.transaction = MagicMock(side_effect=_session)
    db.read = MagicMock(side_effect=_session)
    db.session = session
    return db


# ══════════════════════════════════════════════════════════════════════════
# Sample Aggregates (wire shape, camelCase)
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def sample_template():
    return {"id": "tpl-1", "name": "Night round", "items": ["Gate A", "Gate B", "Gate C"]}


@pytest.fixture
def sample_task():
    return {
        "id": "t-1",
        "title": "Check perimeter",
        "sector": "North",
        "ticketId": "TCK-42",
        "description": "Walk the fence line",
        "responsible": "Ana",
        "createdAt": 1700000000000,
        "checklist": [
            {"label": "Fence intact", "checked": True},
            {"label": "Lights on", "checked": False},
        ],
    }


@pytest.fixture
def sample_round():
    return {
        "id": "r1",
        "taskId": "t-1",
        "taskTitle": "Check perimeter",
        "sector": "North",
        "ticketId": "TCK-42",
        "responsible": "Ana",
        "startTime": 1700000000000,
        "endTime": 1700000600000,
        "durationSeconds": 600,
        "observations": "Gate B squeaks",
        "issuesDetected": True,
        "aiAnalysis": None,
        "signature": "c2lnbmF0dXJl",
        "validationToken": "tok-1",
        "checklistState": {"item1": True, "item2": False},
        "photos": ["cGhvdG8x", "cGhvdG8y"],
    }


@pytest.fixture
def sample_user():
    return {
        "id": "u-1",
        "name": "Ana Souza",
        "email": "ana@example.com",
        "password": "s3cret",
        "role": "guard",
        "active": True,
    }


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def test_client(database):
    """
    Provides an async HTTP test client for endpoint testing.

    How:   Builds an app around the SQLite `database` fixture and routes
           requests to it through ASGITransport (no server, no lifespan).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from rondaguard.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
