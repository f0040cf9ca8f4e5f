"""
SnipShelf Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by action routes via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transaction boundary:
    One request = one session = one transaction. Multi-step handlers
    (clear other defaults → write row → re-fetch) therefore commit or roll
    back as a unit; nothing is committed until the handler has returned.

    Routes declare the session with `Depends(get_db_session, scope="function")`
    so the commit runs before the response is sent. A failed commit is
    reported to the caller as INTERNAL_SERVER_ERROR, never as success.

Connection Pooling Strategy:
    pool_size=20, max_overflow=10 on PostgreSQL (at most 30 connections).
    SQLite (tests, local runs) uses NullPool: a connection per session, so
    no pooled connection outlives the event loop that opened it.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from snipshelf.config import settings
from snipshelf.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """Pool arguments for the configured backend."""
    if settings.is_sqlite:
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    # SQL echo is noisy; only on in DEBUG
    echo=settings.log_level == "DEBUG",
    **_engine_options(),
)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: ORM objects returned by services stay readable
# after get_db_session commits (response serialization happens afterwards)
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object so Alembic (and the test suite's
    create_all) see every table.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction (failure → DatabaseError)
        4. On error: rolls back and re-raises for the exception handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.post("/getSnippet")
        async def get_snippet(db: AsyncSession = Depends(get_db_session, scope="function")):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            try:
                await session.commit()
            except SQLAlchemyError as e:
                logger.error("Commit failed: %s", str(e), exc_info=True)
                raise DatabaseError(
                    message="Could not save changes. Please try again.",
                    context={"error_type": type(e).__name__},
                ) from e
        except Exception:
            # Any failure (guard denial, DB error, serialization bug) discards
            # every write the handler made
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called on application shutdown."""
    await engine.dispose()
