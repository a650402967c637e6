"""
Async SQLAlchemy database session configuration.
PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) for local runs and tests.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from noticeboard.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if "+asyncpg" in url:
        # Required behind transaction-mode poolers (pgbouncer, Supabase)
        return {"statement_cache_size": 0}
    return {}


# Create async engine
engine = create_async_engine(
    settings.database_url,
    poolclass=NullPool,
    echo=False,
    connect_args=_connect_args(settings.database_url),
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.
    Usage:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions.
    Use in non-FastAPI contexts (startup, side-effect writers, etc).
    Usage:
        async with get_db_context() as db:
            result = await db.execute(...)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
