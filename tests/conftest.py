import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TRACING_ENABLED", "false")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from shared.config.database import Base, enable_sqlite_foreign_keys, get_db


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


def product_payload(**overrides):
    payload = {
        "name": "Mechanical Keyboard",
        "description": "Tenkeyless board with brown switches",
        "brand": "Keychron",
        "price": "19.99",
        "category": "Peripherals",
        "releaseDate": "2024-03-01",
        "productAvailable": True,
        "stockQuantity": 5,
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def make_product(client):
    async def _make(image=None, **overrides):
        files = {"imageFile": image} if image else None
        resp = await client.post(
            "/api/product",
            data={"product": json.dumps(product_payload(**overrides))},
            files=files,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
