"""Database Session Manager — async connection pool, atomic scopes and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - atomic() commits only on clean exit; any exception, cancellation included,
      rolls back every write made through the yielded session
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py), except
      deadlock and serialization failures, which become TransactionConflictError (409)
    - Domain errors pass through unchanged after the rollback

Design Decisions:
    - One manager built in the FastAPI lifespan and kept on app.state: no module
      singleton, the orchestrator receives it explicitly
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Pool sizing optional: SQLite (tests, local runs) uses its own pool class
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from funds_transfer.core.errors import (
    DatabaseError, TransactionConflictError, TransferEngineError,
)
from funds_transfer.db.base import Base

logger = logging.getLogger(__name__)

# deadlock_detected, serialization_failure: Postgres aborted one side of a race
RETRYABLE_SQLSTATES = frozenset({"40P01", "40001"})


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int | None = 20,
        max_overflow: int | None = 10,
        echo: bool = False,
        conflict_retry_after_ms: int | None = None,
    ):
        engine_kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if pool_size is not None:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["pool_recycle"] = 3600
        if max_overflow is not None:
            engine_kwargs["max_overflow"] = max_overflow
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._retry_after_ms = conflict_retry_after_ms
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except DBAPIError as e:
            await session.rollback()
            raise self._map_driver_error(e) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown") from e
        finally:
            await session.close()

    def _map_driver_error(self, e: DBAPIError) -> TransferEngineError:
        sqlstate = _sqlstate(e)
        if sqlstate in RETRYABLE_SQLSTATES:
            logger.warning(
                f"DB transaction aborted by concurrent writer (sqlstate {sqlstate})",
                extra={"error_code": "CONCURRENCY_CONFLICT"},
            )
            return TransactionConflictError(sqlstate, self._retry_after_ms)
        if isinstance(e, IntegrityError):
            logger.error(f"DB integrity error: {e}")
            return DatabaseError("Integrity constraint violated", "commit")
        if isinstance(e, OperationalError):
            logger.error(f"DB operational error: {e}")
            return DatabaseError("Connection or operational error", "execute")
        logger.error(f"DB driver error: {e}")
        return DatabaseError("Database driver error", "query")

    @asynccontextmanager
    async def atomic(self) -> AsyncGenerator[AsyncSession, None]:
        """All-or-nothing scope: commit on clean exit, rollback on any exit by exception."""
        async with self.session() as session:
            async with session.begin():
                yield session

    async def create_all(self) -> None:
        """Create tables directly (tests and local runs — migrations preferred)."""
        from funds_transfer import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _sqlstate(e: DBAPIError) -> str | None:
    # asyncpg / psycopg expose .sqlstate, psycopg2 exposes .pgcode
    orig = e.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
