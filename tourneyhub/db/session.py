"""
Async database session management with connection pooling
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from tourneyhub.core.config import settings

# Pool configuration with environment variable overrides
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", settings.db_pool_size))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", settings.db_max_overflow))


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy own BEGIN on SQLite.

    The sqlite3 driver issues its own BEGIN lazily, which breaks SAVEPOINT
    handling; every ledger step runs in a savepoint.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the given URL"""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(engine)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=30,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async_engine = build_engine(settings.database_url, echo=settings.debug)

# Create async session factory
AsyncSessionLocal = build_session_factory(async_engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session for FastAPI dependency injection.
    Provides proper session lifecycle management with connection pooling.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block inside a fresh transaction on ``session``.

    Any implicit transaction left open by earlier reads (autobegin) is
    committed first so the block gets its own BEGIN/COMMIT.
    """
    if session.in_transaction():
        await session.commit()
    async with session.begin():
        yield session
