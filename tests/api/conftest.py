"""API test fixtures: FastAPI app over in-memory SQLite.

Invariants:
    - get_db dependency overridden to use the test DB session factory
    - client sends a valid x-api-key by default; anon_client sends none
"""

import pytest
from httpx import ASGITransport, AsyncClient

from car_service.config import Settings
from car_service.infrastructure.database import get_db
from car_service.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        port=8080,
        api_keys="test-key-1, test-key-2",
    )


@pytest.fixture
def app(settings, test_session_factory):
    app = create_app(settings)

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app, api_key):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
        headers={"x-api-key": api_key},
    ) as c:
        yield c


@pytest.fixture
async def anon_client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
