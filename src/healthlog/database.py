from collections.abc import AsyncGenerator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from healthlog.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.db_url,
    echo=settings.debug,
)

async_session = async_sessionmaker(engine, expire_on_commit=False)

# The device store is optional; without a URL the device source reports itself
# as unavailable and every merge falls back to primary-store data only.
device_engine = (
    create_async_engine(settings.device_db_url, echo=settings.debug)
    if settings.device_db_url
    else None
)

device_session = (
    async_sessionmaker(device_engine, expire_on_commit=False) if device_engine else None
)


class Base(DeclarativeBase):
    pass


# Tables of the device store live in their own metadata so they are never
# created alongside the primary schema.
device_metadata = MetaData()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_device_db() -> AsyncGenerator[AsyncSession | None, None]:
    if device_session is None:
        yield None
        return
    async with device_session() as session:
        yield session
