"""Async database session and engine configuration."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.config import settings

Base = declarative_base()

# Async engine for PostgreSQL (default) or provided DATABASE_URL
engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def init_models() -> None:
    """Create tables that do not exist yet."""
    # Registers the ORM classes on Base.metadata
    from app.repositories import places  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
