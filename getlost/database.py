"""Async database engine, session factory and declarative base."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from getlost.config import settings

is_sqlite = settings.database_url.startswith("sqlite")

if is_sqlite:
    # SQLite has no pool sizing; share the connection across threads
    engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
else:
    engine_kwargs = {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        # Avoid stale idle connections causing first-hit failures after inactivity
        "pool_pre_ping": True,
    }

engine = create_async_engine(settings.database_url, echo=False, **engine_kwargs)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base for all models."""


def utcnow() -> datetime:
    """Current UTC time, used as the Python-side default for timestamps."""
    return datetime.now(UTC)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    The whole request is one transaction: committed when the handler returns,
    rolled back if anything raises.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create tables directly (development only; use Alembic elsewhere)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
