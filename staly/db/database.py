"""
Database connection and session management.
Uses SQLAlchemy async with SQLite (aiosqlite) by default, PostgreSQL optionally.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


# Convert sync URL to async URL if needed
def get_async_url(url: str) -> str:
    """Convert a SQLite/PostgreSQL URL to its async driver format."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    elif url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


def create_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine for the configured database."""
    return create_async_engine(get_async_url(url), echo=echo, future=True, **kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database tables."""
    # Import models so they register on Base.metadata
    from staly.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
