"""Async engine and session management."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ledger_ml.config.settings import Settings, get_settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an engine for `settings.database_url`.

    Pool sizing only applies to server databases; SQLite keeps the
    dialect's default pool.
    """
    url = make_url(settings.database_url)
    options: dict[str, Any] = {"echo": settings.database_echo}
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    return create_async_engine(url, **options)


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    """Shared engine built from the process settings."""
    return build_engine(get_settings())


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session (FastAPI dependency)."""
    async with get_session_maker()() as session:
        yield session
