"""
SnipShelf Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set BEFORE the package is imported, so the
       module-level engine points at a throwaway SQLite file (aiosqlite).

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure unit tests (no DB)
    ├── db_tables: creates every table before the test, drops it after
    ├── test_client: HTTPX AsyncClient over ASGITransport (no server)
    └── alice / bob / anonymous: ActionClient bound to a principal header
"""

import os
import tempfile

# Override settings for testing BEFORE any snipshelf imports
_TEST_DIR = tempfile.mkdtemp(prefix="snipshelf_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient, Response  # noqa: E402

import snipshelf.models  # noqa: E402,F401
from snipshelf.config import settings  # noqa: E402
from snipshelf.database import Base, engine  # noqa: E402


class ActionClient:
    """
    Calls /_actions/<name> as a given user.

    Usage:
        resp = await alice.call("createSnippetCollection", {"name": "SQL"})
        collection = resp.json()["data"]["collection"]
    """

    def __init__(self, client: AsyncClient, user_id: Optional[str]):
        self.client = client
        self.user_id = user_id
        self.headers = {settings.auth_user_header: user_id} if user_id else {}

    async def call(self, action: str, body: Optional[Dict[str, Any]] = None) -> Response:
        return await self.client.post(
            f"/_actions/{action}",
            json=body if body is not None else {},
            headers=self.headers,
        )

    async def data(self, action: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call an action that must succeed and return its `data` payload."""
        resp = await self.call(action, body)
        assert resp.status_code == 200, resp.text
        payload = resp.json()
        assert payload["success"] is True
        return payload["data"]


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_tables():
    """Fresh schema for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def test_client(db_tables):
    """HTTPX AsyncClient routed straight into the FastAPI app."""
    from snipshelf.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def alice(test_client) -> ActionClient:
    return ActionClient(test_client, "user-alice")


@pytest.fixture
def bob(test_client) -> ActionClient:
    return ActionClient(test_client, "user-bob")


@pytest.fixture
def anonymous(test_client) -> ActionClient:
    return ActionClient(test_client, None)
