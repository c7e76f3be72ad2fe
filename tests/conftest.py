"""Pytest configuration and fixtures for the operations core.

Repository and worker tests run against a fresh SQLite (aiosqlite) file
database per test, created from Base.metadata. API tests use an httpx
ASGITransport client with get_db overridden to the same database.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

import operations.infrastructure.persistence.models  # noqa: F401  (register tables)
from operations.core.config import get_settings
from operations.infrastructure.persistence.database import (
    Base,
    create_session_factory,
    get_db,
)



@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are re-read for every test so env overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def db_engine(tmp_path):
    """Async engine on a per-test SQLite file with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'operations.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(session_factory):
    """Session for repository tests. Rolled back after the test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), reading the test database."""
    from operations.main import create_app

    app = create_app()

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
