"""
BottleNet Backend: Database Engine Management
===============================================

What:  Async SQLAlchemy engine and session factory construction, plus the
       declarative Base shared by all ORM models.
Why:   Centralizes connection logic; the DocumentStore (store.py) builds on
       top of these helpers and owns the engine for the process lifetime.
How:   Engines are created explicitly (no module-level engine) so the app
       factory, tests and Alembic can each build one for their own URL.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite (tests, local development) gets none of the pool arguments;
    aiosqlite does not support a sized queue pool.

SQLite Transactions:
    pysqlite defers BEGIN until the first write, so two concurrent
    read-modify-write updates both read the old row and the last commit
    wins. SQLite engines turn off the driver's own transaction handling and
    open every transaction with BEGIN IMMEDIATE, which takes the database
    write lock up front. Concurrent writers queue on the busy timeout.
"""

from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bottlenet.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share a single metadata
    object (used by Alembic and by init_models()).
    """
    pass


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Build an async engine for the given URL (defaults to settings.database_url).

    Echo is tied to DEBUG logging because SQL logging is noisy.
    """
    url = database_url or settings.database_url
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if _is_sqlite_url(url):
        engine = create_async_engine(url, **kwargs)
        _use_immediate_transactions(engine)
        return engine

    kwargs.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return create_async_engine(url, **kwargs)


def _is_sqlite_url(url: str) -> bool:
    return url.startswith("sqlite")


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction start with BEGIN IMMEDIATE."""

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory used by the store for its short-lived per-operation sessions.

    expire_on_commit=False: documents returned by the store stay readable
    after the session that loaded them is closed.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables. Used by tests and by DB_AUTO_CREATE."""
    # Registers the models with Base.metadata
    from bottlenet.models import message, thread, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
