"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema is managed by Alembic migrations in production (Postgres via
asyncpg). Tests and local development may use SQLite via aiosqlite and
create tables from Base.metadata.

Engine and session factory are created lazily on first use so import
does not trigger Settings validation.

When running against Postgres, sessions set app.current_tenant_id from the
tenant context so row-level security policies restrict rows to the current
tenant.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from operations.core.config import get_settings
from operations.core.tenant_context import (
    TENANT_ID_MAX_LENGTH,
    is_valid_tenant_id_format,
)
from operations.core.tenant_context import get_tenant_id as get_current_tenant_id

logger = logging.getLogger(__name__)


# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: Any = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    engine_kwargs: dict[str, Any] = {
        "echo": settings.database_echo,
        "pool_pre_ping": True,
    }
    if not settings.database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = (
            settings.db_pool_size if settings.db_pool_size is not None else 20
        )
        engine_kwargs["max_overflow"] = (
            settings.db_max_overflow if settings.db_max_overflow is not None else 30
        )
        engine_kwargs["pool_recycle"] = 3600
    engine = create_async_engine(settings.database_url, **engine_kwargs)
    AsyncSessionLocal = create_session_factory(engine)


def create_session_factory(bind: Any) -> async_sessionmaker[AsyncSession]:
    """Session factory with the project's session options (used by workers and tests)."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory, creating the engine if needed."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _quote_set_value(value: str) -> str:
    """Escape a value for use in PostgreSQL SET (single-quoted literal)."""
    return value.replace("'", "''")


async def set_tenant_context(session: AsyncSession) -> None:
    """Set app.current_tenant_id on the session for RLS (Postgres only).

    SET LOCAL does not support bound parameters in PostgreSQL; the value must be
    interpolated. We validate format and escape single quotes. If validation
    fails, we skip SET LOCAL and log.
    """
    tenant_id = get_current_tenant_id()
    if not tenant_id:
        return
    if session.get_bind().dialect.name != "postgresql":
        return
    if not is_valid_tenant_id_format(tenant_id):
        logger.warning(
            "Skipping SET LOCAL app.current_tenant_id: tenant_id failed format validation (length=%d, max=%d)",
            len(tenant_id),
            TENANT_ID_MAX_LENGTH,
        )
        return
    safe = _quote_set_value(tenant_id)
    await session.execute(text(f"SET LOCAL app.current_tenant_id = '{safe}'"))


async def get_db():
    """Database session dependency for read operations.

    Does not commit (the API is read-only). When tenant context is set, runs SET LOCAL
    app.current_tenant_id for RLS. Yields a session and closes it on exit.
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        await set_tenant_context(session)
        yield session

