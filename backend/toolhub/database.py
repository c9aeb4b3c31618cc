"""
Toolhub Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   One engine per process; every HTTP request gets its own AsyncSession
       that commits on success and rolls back on any error. That session is
       the transaction boundary of the approval workflow.
Who:   Route handlers via Depends(get_db_session); the seed script and tests
       use `async_session_factory` / `configure_sqlite` directly.

SQLite note:
    The sqlite3/aiosqlite drivers delay BEGIN and never open a transaction for
    SAVEPOINT, and SQLite ignores foreign keys unless asked. The approval
    workflow relies on both (per-tag savepoints, restrict/cascade on tool_tags),
    so `configure_sqlite` installs the driver hooks documented by SQLAlchemy to
    make SQLite behave like PostgreSQL here.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from toolhub.config import settings


def configure_sqlite(engine: AsyncEngine) -> AsyncEngine:
    """
    Make SQLite honour SAVEPOINT and foreign keys.

    What:  Disables the driver's implicit transaction handling and emits our own
           BEGIN, turning on foreign key enforcement just before it (the pragma
           is a no-op inside a transaction).
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_with_foreign_keys(conn):
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")
        conn.exec_driver_sql("BEGIN")

    return engine


def _engine_options() -> Dict[str, Any]:
    if settings.is_sqlite:
        return {"echo": settings.log_level == "DEBUG"}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
        "echo": settings.log_level == "DEBUG",
    }


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())
if settings.is_sqlite:
    configure_sqlite(engine)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response models read attributes after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all Toolhub ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back, so a failed approval leaves the request pending
        5. Always: closes the session (returns connection to pool)

    Raises:
        Any exception from the handler, re-raised for the global error handlers.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called from the app lifespan on shutdown."""
    await engine.dispose()
