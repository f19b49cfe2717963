"""
Database Connection Management

Async PostgreSQL engine and request-scoped sessions for the
booking store.

Transaction boundary: repositories only flush. A write becomes
durable when the enclosing transaction() block exits, which the
scheduler enters while it holds the therapist's booking lock, so
a booking is committed before the next contender runs its
conflict check. Request sessions never commit implicitly.

SECURITY: Connection strings contain credentials and must
never be logged.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from manosetu.config import get_settings
from manosetu.config.logging_config import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the users and therapy_sessions tables."""
    pass


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Commit everything flushed inside the block, or roll it all back.

    Reads issued before the block may already have begun a
    transaction; it is folded into this one.

    Usage:
        async with transaction(session):
            await repo.create(booking)
    """
    try:
        yield session
    except BaseException:
        await session.rollback()
        raise
    await session.commit()


class DatabaseManager:
    """
    Owns the engine and hands out sessions.

    Usage:
        db = get_db_manager()
        await db.initialize()
        async with db.session() as session:
            async with transaction(session):
                ...
        await db.close()
    """

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self) -> None:
        """Create the pooled engine. Called once from the application lifespan."""
        if self.is_initialized:
            logger.warning("Database already initialized")
            return

        database = get_settings().database
        self._engine = create_async_engine(
            database.async_url,
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=get_settings().debug,
        )
        # Domain entities outlive the commit that persisted them
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database connection pool initialized", pool_size=database.pool_size)

    async def close(self) -> None:
        """Dispose of pooled connections on shutdown."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connections closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Open a session for one request.

        Anything left uncommitted when the block exits is
        rolled back; only transaction() commits.
        """
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        async with self._session_factory() as session:
            try:
                yield session
            finally:
                if session.in_transaction():
                    await session.rollback()

    async def health_check(self) -> bool:
        """True if a trivial query succeeds."""
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed", error_type=type(e).__name__)
            return False
        return True


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Process-wide database manager."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding the request's database session."""
    async with get_db_manager().session() as session:
        yield session
