"""
RondaGuard Backend - Database Façade
====================================

What:  Async SQLAlchemy engine with a bounded connection pool, wrapped in a
       `Database` object that hands out transactional and read sessions.
How:   One `Database` is created at startup (see main.lifespan), stored on
       `app.state`, passed into every service call, and disposed at shutdown.
Who:   Services, the upsert engine, the aggregate reader, the health route.

Connection Pooling:
    pool_size=10:    Maximum simultaneous connections (db_pool_size)
    max_overflow=0:  No burst connections beyond the budget
    pool_timeout=30: Seconds a caller queues for a connection before
                     TransientStoreError
    pool_pre_ping:   Validates connections before use
    pool_recycle:    Recycles connections every hour

Error Translation:
    Every sqlalchemy.exc error leaving a session is rolled back and
    converted exactly once, here, into the application hierarchy:
        IntegrityError                          → ConflictError
        OperationalError / InterfaceError /
        pool TimeoutError / invalidated conn.   → TransientStoreError
        anything else                           → DatabaseError
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from starlette.requests import Request

from rondaguard.config import Settings
from rondaguard.exceptions import (
    ConflictError,
    DatabaseError,
    RondaGuardError,
    TransientStoreError,
)

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, used by Alembic and by
    `Database.create_schema()` in tests.
    """
    pass


def translate_store_error(error: sa_exc.SQLAlchemyError) -> RondaGuardError:
    """
    Map a SQLAlchemy exception onto the application error hierarchy.

    The driver message is kept in `context` (logged) and never in `message`
    (returned to clients).
    """
    context = {"original_error": type(error).__name__}
    orig = getattr(error, "orig", None)
    if orig is not None:
        context["driver_error"] = str(orig)

    if isinstance(error, sa_exc.IntegrityError):
        return ConflictError(
            message="The write violates a data constraint (duplicate id or email, or missing parent).",
            context=context,
        )
    if isinstance(error, sa_exc.TimeoutError):
        return TransientStoreError(
            message="All database connections are busy. Please try again.",
            retry_after=1,
            context=context,
        )
    if isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError)):
        return TransientStoreError(context=context)
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return TransientStoreError(context=context)
    return DatabaseError(context=context)


class Database:
    """
    Process-scoped connection pool and transaction provider.

    Methods:
        transaction(): session inside BEGIN; commit on success, rollback on
                       any exception, close always
        read():        plain session for SELECTs, never committed, close always
        ping():        SELECT 1 for health checks
        create_schema(): CREATE TABLE for every model (tests, local dev)
        dispose():     close every pooled connection (shutdown)
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 0,
        pool_timeout: float = 30.0,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        engine_kwargs = {"echo": echo, "pool_pre_ping": pool_pre_ping}
        # SQLite pools are per-file and do not take sizing arguments
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=3600,
            )
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: row objects stay readable after the session closes
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "Database":
        """Build the façade from application settings."""
        return cls(
            config.database_url,
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
            pool_pre_ping=config.db_pool_pre_ping,
            echo=config.log_level == "DEBUG",
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Yield a session whose statements run in one transaction.

        How it works:
            1. Takes a connection from the pool (waits up to pool_timeout)
            2. BEGIN
            3. Yields the session to the caller
            4. On success: COMMIT
            5. On any error: ROLLBACK, then re-raise (store errors translated)
            6. Always: close the session, returning the connection to the pool

        Usage:
            async with db.transaction() as session:
                await session.execute(insert(Task).values(...))
        """
        session = self.session_factory()
        try:
            await session.begin()
            yield session
            await session.commit()
        except Exception as error:
            await self._rollback_quietly(session)
            if isinstance(error, sa_exc.SQLAlchemyError):
                translated = translate_store_error(error)
                logger.error(
                    "Transaction rolled back: %s | Context: %s",
                    translated.kind,
                    translated.context,
                )
                raise translated from error
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[AsyncSession]:
        """Yield a session for non-transactional reads."""
        session = self.session_factory()
        try:
            yield session
        except sa_exc.SQLAlchemyError as error:
            translated = translate_store_error(error)
            logger.error("Read failed: %s | Context: %s", translated.kind, translated.context)
            raise translated from error
        finally:
            await session.close()

    async def ping(self) -> None:
        """Run SELECT 1; raises the translated store error when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except sa_exc.SQLAlchemyError as error:
            raise translate_store_error(error) from error

    async def create_schema(self) -> None:
        """Create every table registered on Base.metadata (idempotent)."""
        # Registers all models on Base.metadata
        import rondaguard.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database connection pool disposed")

    @staticmethod
    async def _rollback_quietly(session: AsyncSession) -> None:
        # The original error is what the caller needs to see
        try:
            await session.rollback()
        except sa_exc.SQLAlchemyError as rollback_error:
            logger.warning("Rollback failed: %s", rollback_error)


async def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the process-wide Database.

    Example usage in a route:
        @router.get("/tasks")
        async def list_tasks(db: Database = Depends(get_database)):
            return await task_service.list_tasks(db)
    """
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise TransientStoreError(message="The database is not initialized yet.")
    return database
