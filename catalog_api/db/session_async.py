# catalog_api/db/session_async.py
"""Async SQLAlchemy session utilities."""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from catalog_api.core.config import settings
from catalog_api.db.providers import build_async_engine, resolve_profile

provider_profile = resolve_profile(settings)

async_engine: AsyncEngine = build_async_engine(provider_profile)

AsyncSessionLocal = async_sessionmaker(
    bind=async_engine,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an AsyncSession (one unit of work per request)."""
    async with AsyncSessionLocal() as session:
        yield session


async def commit(session: AsyncSession) -> None:
    """Commit and rollback on failure."""
    try:
        await session.commit()
    except Exception:
        await rollback(session)
        raise


async def rollback(session: AsyncSession) -> None:
    """Rollback active transaction if needed."""
    if session.in_transaction():
        await session.rollback()
