"""
Async engine and sessions. Requests get one session each through get_db; scripts use session_scope().
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """SQLite shares one connection (in-memory databases live on it); other dialects pool normally."""
    options = {"echo": settings.debug}
    if settings.is_sqlite:
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    elif settings.is_postgresql:
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

if settings.is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
        # Loan children declare ON DELETE CASCADE; SQLite ignores it unless asked
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back and re-raise on any error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back session")
            await session.rollback()
            raise


async def get_db() -> AsyncIterator[AsyncSession]:
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    import models  # noqa: F401  registers the tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready (%s)", engine.url.get_backend_name())


async def dispose_db() -> None:
    await engine.dispose()
