"""
Pytest fixtures for the test database, client and authenticated users.

Runs against an in-memory SQLite database shared through a StaticPool;
tables are created and dropped around every test for isolation. Settings
are read once at import time, so the environment is prepared before the
application is imported.
"""

import os
import tempfile
from typing import AsyncGenerator

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="tourmerch-uploads-")

import fakeredis.aioredis
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tourmerch.db.base import Base
from tourmerch.db.session import get_db
from tourmerch.main import app
from tourmerch.services import cache_service

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(client: AsyncClient):
    """Factory registering an account through the API."""

    async def _make_user(email: str, name: str = "Merch Seller", role: str = None) -> dict:
        payload = {"name": name, "email": email, "password": "testpassword123"}
        if role:
            payload["role"] = role
        response = await client.post("/api/users", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()
        return {
            "user": data["user"],
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return _make_user


@pytest_asyncio.fixture
async def test_user(make_user) -> dict:
    return await make_user("test@example.com", name="Test Seller")


@pytest_asyncio.fixture
async def auth_headers(test_user: dict) -> dict:
    """Authorization headers with Bearer token."""
    return test_user["headers"]


@pytest_asyncio.fixture
async def other_headers(make_user) -> dict:
    """Headers of a second, unrelated account."""
    other = await make_user("other@example.com", name="Other Seller")
    return other["headers"]


@pytest_asyncio.fixture
async def test_tour(client: AsyncClient, auth_headers: dict) -> dict:
    response = await client.post(
        "/api/tours",
        json={
            "name": "Fall Tour",
            "band_name": "The Testers",
            "start_date": "2026-11-01",
            "end_date": "2026-12-15",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def test_show(client: AsyncClient, auth_headers: dict, test_tour: dict) -> dict:
    response = await client.post(
        "/api/shows",
        json={
            "tour_id": test_tour["id"],
            "date": "2026-11-05",
            "venue": "The Roxy",
            "city": "Los Angeles",
            "state": "CA",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["show"]


@pytest_asyncio.fixture
async def make_item(client: AsyncClient, auth_headers: dict, test_tour: dict):
    """Factory adding an inventory item to the test tour."""

    async def _make_item(**fields) -> dict:
        payload = {"tour_id": test_tour["id"], **fields}
        response = await client.post("/api/inventory", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["inventory"]

    return _make_item


@pytest_asyncio.fixture
async def poster(make_item) -> dict:
    """Hard item with 10 in stock."""
    return await make_item(name="Poster", type="hard", price="20.00", quantity=10)


@pytest_asyncio.fixture
async def tshirt(make_item) -> dict:
    """Soft item with 5 each of S, M and L."""
    return await make_item(
        name="T-Shirt",
        type="soft",
        price="30.00",
        sizes=[
            {"size": "S", "quantity": 5},
            {"size": "M", "quantity": 5},
            {"size": "L", "quantity": 5},
        ],
    )


@pytest_asyncio.fixture
async def fetch_item(client: AsyncClient, auth_headers: dict, test_tour: dict):
    """Look up the current state of one item through the tour listing."""

    async def _fetch_item(item_id: int) -> dict:
        response = await client.get(
            "/api/inventory", params={"tour_id": test_tour["id"]}, headers=auth_headers
        )
        assert response.status_code == 200
        return next(item for item in response.json() if item["id"] == item_id)

    return _fetch_item


@pytest_asyncio.fixture
async def fake_redis(monkeypatch):
    """In-process Redis standing in for the summary cache."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)

    async def _get_redis():
        return client

    monkeypatch.setattr(cache_service, "get_redis", _get_redis)
    yield client

    await client.flushall()
    await client.aclose()
