"""Root conftest: shared settings, payloads and async SQLite fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the cars table
    - Required settings exist in the environment before any import reads them
"""

import os

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("PORT", "8080")
os.environ.setdefault("API_KEYS", "test-key-1,test-key-2")

from car_service.db.base import Base  # noqa: E402
import car_service.models  # noqa: E402,F401


@pytest.fixture
def api_key() -> str:
    return "test-key-1"


@pytest.fixture
def bmw_car() -> dict:
    return {
        "brand": "BMW",
        "color": "black",
        "carModel": "512ii",
        "manufacturer": {
            "companyName": "BMW",
            "country": "Germany",
            "factoryLocation": [41.12, -71.34],
        },
    }


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def broken_db():
    """Session on a database without the cars table: every query fails."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with factory() as session:
        yield session
    await engine.dispose()
