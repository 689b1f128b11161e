"""
Async database engine and session management.

One AsyncSession per request, handed out by the get_db dependency.
"""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from atlasstudio.config import settings
from atlasstudio.models.base import Base

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)

AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session that is closed after the request."""
    async with AsyncSessionLocal() as session:
        yield session


async def create_all_tables(bind=None):
    """Create all tables registered on Base.metadata."""
    # Register models with Base
    from atlasstudio.models import user  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all_tables(bind=None):
    """Drop all tables (for testing)."""
    from atlasstudio.models import user  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
