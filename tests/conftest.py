# tests/conftest.py
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import os

import pytest
import pytest_asyncio
import httpx
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession

# Tests always run on the local SQLite provider.
os.environ["DATABASE_PROVIDER"] = "sqlite"
os.environ["SQLITE_URL"] = "sqlite:///./test.db"
os.environ["APPLY_MIGRATIONS_ON_STARTUP"] = "false"

from catalog_api.main import app
from catalog_api.db.session import Base
from catalog_api.db.session_async import AsyncSessionLocal
import catalog_api.models.product  # noqa: F401

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

sync_engine = create_engine(SQLALCHEMY_DATABASE_URL)


# ---------- Fixtures ----------
@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create the tables once per test session."""
    Base.metadata.drop_all(bind=sync_engine)
    Base.metadata.create_all(bind=sync_engine)
    yield
    Base.metadata.drop_all(bind=sync_engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with sync_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest_asyncio.fixture(scope="function")
async def client():
    """AsyncClient bound to the app without extra overrides."""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def async_db_session() -> AsyncSession:
    """AsyncSession for tests that talk to repositories directly."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.rollback()


# --- Data helpers (go through the API, like a real client) ---

@pytest.fixture
def make_category(client: httpx.AsyncClient):
    async def _make(name: str = "Electronics", description: str | None = "Devices") -> dict:
        resp = await client.post("/api/categories", json={"name": name, "description": description})
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make


@pytest.fixture
def make_product(client: httpx.AsyncClient):
    async def _make(category_id: int, **overrides) -> dict:
        payload = {
            "name": "Smartphone XYZ",
            "description": "Latest smartphone",
            "price": 999.99,
            "stock": 50,
            "isActive": True,
            "categoryId": category_id,
        }
        payload.update(overrides)
        resp = await client.post("/api/products", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
