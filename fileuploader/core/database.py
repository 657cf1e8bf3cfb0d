"""File Uploader Database Configuration - Async SQLAlchemy.

Each application builds its own engine and session factory from the
``Settings`` it was created with and keeps them on ``app.state``.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from fileuploader.core.config import Settings
from fileuploader.core.logging import get_logger

logger = get_logger("database")

# Base class for models
Base = declarative_base()


def build_engine(config: Settings) -> AsyncEngine:
    """Create an async engine for the configured database URL.

    Pool sizing only applies to server databases; SQLite engines use the
    dialect's default pool.
    """
    kwargs: dict[str, Any] = {
        # Only echo SQL when debug is explicitly enabled
        "echo": config.debug and config.log_level == "DEBUG",
    }
    if not config.is_sqlite:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
            pool_recycle=config.db_pool_recycle,
            pool_pre_ping=True,
        )
    return create_async_engine(config.database_url, **kwargs)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a session from the application's own database."""
    async with request.app.state.session_maker() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            # BaseException so cancellation also rolls back
            await session.rollback()
            raise


async def check_db_connection(session_maker: async_sessionmaker[AsyncSession]) -> bool:
    """Check if the database behind ``session_maker`` is reachable."""
    try:
        async with session_maker() as session:
            await session.execute(text("SELECT 1"))
            return True
    except (OSError, ConnectionError) as e:
        logger.debug(f"Database connection check failed: {e}")
        return False
    except Exception as e:
        logger.warning(f"Unexpected error checking database connection: {e}")
        return False
