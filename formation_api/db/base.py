"""Async SQLAlchemy engine, session factory, declarative Base, and FastAPI dependency."""


import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from formation_api.core.config import settings
from formation_api.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
_engine_kwargs: dict = {
    "pool_pre_ping": True,
    "echo": settings.app_env == "development",
}

# SQLite (local dev) doesn't support connection pooling parameters
if settings.database_url.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_async_engine(settings.database_url, **_engine_kwargs)

# Execution option asking for the write lock at BEGIN (see transaction())
WRITE_LOCK_OPTION = "begin_write_lock"

if engine.dialect.name == "sqlite":

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_begin_immediate(conn):
        """Start write transactions with BEGIN IMMEDIATE.

        SQLite has no row locks and the driver defers its own BEGIN until
        the first INSERT/UPDATE, so reads made before that see whatever was
        last committed. BEGIN IMMEDIATE takes the database write lock up
        front; a second writer waits on the busy timeout until we commit.
        Read-only sessions keep the driver's default behaviour.
        """
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

# ---------------------------------------------------------------------------
# Declarative Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """All ORM models inherit from this base."""

# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session; roll back on error.

    Mutating services commit their own unit of work; the trailing commit
    here only flushes read-side state and is a no-op otherwise.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------
@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Commit everything written inside the block, or nothing.

    Database errors are rolled back and re-raised as PersistenceError;
    any other exception is rolled back and propagated unchanged.

    When the session has not begun yet, its connection is opened with the
    write lock option, so on SQLite the whole block runs under the
    database write lock. Other backends lock rows with SELECT ... FOR UPDATE.
    """
    try:
        if not session.in_transaction():
            await session.connection(execution_options={WRITE_LOCK_OPTION: True})
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Transaction rolled back: %s", exc)
        raise PersistenceError() from exc
    except Exception:
        await session.rollback()
        raise
