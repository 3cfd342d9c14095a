"""Database session management.

PostgreSQL (asyncpg) gets a sized connection pool; SQLite, used by the test
suite, shares one connection so an in-memory schema survives across sessions.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..core.config import settings


def engine_options(url: str) -> dict[str, Any]:
    """Pool arguments suited to the database behind ``url``."""
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


def build_engine(url: str | None = None) -> AsyncEngine:
    url = str(url or settings.DATABASE_URL)
    return create_async_engine(url, echo=settings.DEBUG, **engine_options(url))


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services read article state after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI endpoints to get database session.

    Services commit their own unit of work; anything left pending when a
    request fails is rolled back.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
