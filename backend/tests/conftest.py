"""
BottleNet Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh file-backed SQLite database (aiosqlite) with
       the real DocumentStore on top, so services and routes run against
       actual SQL instead of mocks. Failure paths patch single store
       operations with unittest.mock.

Fixture Hierarchy (all function-scoped):
    ├── store:        DocumentStore over an empty SQLite file
    ├── make_users:   async factory inserting N users, returns them in order
    ├── fixed_rng:    random stand-in that always returns a chosen offset
    └── test_client:  HTTPX AsyncClient bound to create_app(store=store)
"""

import os

# Override settings for testing BEFORE any bottlenet imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from bottlenet.database import create_engine, init_models
from bottlenet.models.user import User
from bottlenet.store import DocumentStore


class FixedRandom:
    """randrange() stand-in: always returns `index` (clamped to the range)."""

    def __init__(self, index: int = 0):
        self.index = index
        self.calls = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        return min(self.index, stop - 1)


@pytest_asyncio.fixture
async def store(tmp_path):
    """
    Provides a DocumentStore over a fresh SQLite database file.

    Why a file (not :memory:): every store operation opens its own
    connection, and each in-memory connection would see an empty database.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'bottlenet.db'}")
    await init_models(engine)
    document_store = DocumentStore(engine, timeout=5.0)
    yield document_store
    await document_store.close()


@pytest.fixture
def make_users(store):
    """
    Async factory: ``users = await make_users(3)`` inserts users named
    TestUser1..TestUserN and returns them as User objects in that order.
    """

    async def _make(count: int = 2):
        users = []
        for i in range(1, count + 1):
            user_id = await store.users.insert_one(
                {
                    "name": f"TestUser{i}",
                    "email": f"test{i}@example.com",
                    "kept_messages": [],
                }
            )
            users.append(await store.users.find_one(User.id == user_id))
        return users

    return _make


@pytest.fixture
def fixed_rng():
    return FixedRandom


@pytest_asyncio.fixture
async def test_client(store):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    The store is injected via create_app(store=...); ASGITransport does not
    run the lifespan, so nothing else builds an engine.
    """
    from bottlenet.main import create_app

    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
