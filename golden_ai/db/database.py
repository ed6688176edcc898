"""
Async engine and sessions for the CMS database.

The gateway only touches the shared ``settings`` table (AI profiles and the
legacy AI keys), so one small pool is enough.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from golden_ai.core.config import settings

logger = structlog.get_logger().bind(component="db")


class Base(DeclarativeBase):
    pass


class DatabaseError(Exception):
    """A settings read or write failed at the SQL layer."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


engine = create_async_engine(
    str(settings.database_url),
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    pool_pre_ping=True,
    # The CMS database sits behind a proxy that drops idle connections
    pool_recycle=1800,
    echo=settings.debug,
    connect_args={
        "command_timeout": settings.database_command_timeout,
        "server_settings": {"application_name": "golden_ai_gateway"},
    },
)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; SQL failures are rolled back and re-raised as DatabaseError."""
    async with async_session_maker() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("db_session_failed", error=str(e))
            raise DatabaseError(f"Database operation failed: {e}", original_error=e) from e


async def init_db() -> None:
    """Create the settings table when running against an empty database."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        logger.error("db_init_failed", error=str(e))
        raise
    logger.info("db_initialized", tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    await engine.dispose()


async def check_database_health() -> bool:
    """Round-trip a ``SELECT 1``; used by the readiness check."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("db_health_check_failed", error=str(e))
        return False
    return True
