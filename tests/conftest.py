from collections.abc import AsyncGenerator, Sequence
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from healthlog.api.dependencies import get_cache
from healthlog.database import Base, device_metadata, get_db, get_device_db
from healthlog.main import app
from healthlog.models.device import device_table

test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
test_session = async_sessionmaker(test_engine, expire_on_commit=False)

device_test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)
device_test_session = async_sessionmaker(device_test_engine, expire_on_commit=False)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session() as session:
        yield session


async def override_get_device_db() -> AsyncGenerator[AsyncSession | None, None]:
    async with device_test_session() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_device_db] = override_get_device_db
app.dependency_overrides[get_cache] = lambda: None


@pytest.fixture(autouse=True)
def fixed_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HEALTHLOG_TIMEZONE", "UTC")


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with device_test_engine.begin() as conn:
        await conn.run_sync(device_metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    async with device_test_engine.begin() as conn:
        await conn.run_sync(device_metadata.drop_all)


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def add_device_records(collection: str, rows: Sequence[dict[str, Any]]) -> None:
    """Insert raw tracker rows (``time`` in epoch seconds, ``value`` blob)."""
    async with device_test_session() as session:
        table = device_table(collection)
        for row in rows:
            await session.execute(insert(table).values(key=collection, **row))
        await session.commit()
