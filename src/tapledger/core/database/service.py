"""
Database Service - Core Infrastructure Layer

Purpose
-------
Owns the single async engine of the ledger and hands out sessions. Every
ledger mutation runs inside ``get_transaction()``, which either commits
both records or neither.

Responsibilities
----------------
- Create and dispose the AsyncEngine (idempotent, guarded by an asyncio lock)
- Choose a pool that fits the backend
- Read-only sessions and all-or-nothing write transactions
- Statement timeouts on PostgreSQL
- Schema creation from model metadata and a ``SELECT 1`` health check

Non-Responsibilities
--------------------
- Ledger rules (LeaderboardService)
- Migrations

Connection Pooling
------------------
- AsyncAdaptedQueuePool for server databases (pool_size and max_overflow)
- NullPool for the testing environment and file-backed SQLite
- StaticPool for in-memory SQLite, so every session sees the same database

Usage Example
-------------
>>> async with DatabaseService.get_transaction() as session:
...     record = await session.get(PlayerRecord, key, with_for_update=True)
...     record.total_games += 1
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional, Type

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, Pool, StaticPool

from tapledger.core.config.config import Config
from tapledger.core.logging.logger import get_logger
from tapledger.modules.shared.exceptions import LedgerDomainException

logger = get_logger(__name__)


class DatabaseInitializationError(RuntimeError):
    """Raised when the engine cannot be created or the database is unreachable."""


class DatabaseNotInitializedError(RuntimeError):
    """Raised when a session is requested before ``initialize()``."""


@dataclass(frozen=True)
class _EngineSettings:
    """Database settings frozen for the lifetime of one engine."""

    url: str
    pool_class: Type[Pool]

    @property
    def scheme(self) -> str:
        return self.url.split(":", 1)[0] if ":" in self.url else "unknown"

    @property
    def is_postgres(self) -> bool:
        return self.scheme in ("postgresql", "postgresql+asyncpg")

    def engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "echo": Config.DATABASE_ECHO,
            "poolclass": self.pool_class,
        }
        if self.pool_class is AsyncAdaptedQueuePool:
            kwargs.update(
                pool_size=Config.DATABASE_POOL_SIZE,
                max_overflow=Config.DATABASE_MAX_OVERFLOW,
                pool_recycle=Config.DATABASE_POOL_RECYCLE,
                pool_timeout=Config.DATABASE_POOL_TIMEOUT,
                pool_pre_ping=True,
            )
        return kwargs


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith(":"))


def _settings_for(database_url: Optional[str]) -> _EngineSettings:
    url = database_url or Config.DATABASE_URL
    if not url or not isinstance(url, str):
        raise DatabaseInitializationError("DATABASE_URL must be configured as a non-empty string")

    if _is_memory_sqlite(url):
        pool_class: Type[Pool] = StaticPool
    elif Config.is_testing() or url.startswith("sqlite"):
        pool_class = NullPool
    else:
        pool_class = AsyncAdaptedQueuePool

    return _EngineSettings(url=url, pool_class=pool_class)


class DatabaseService:
    """
    Class-level engine and session management.

    - initialize() / shutdown() / is_initialized()
    - create_schema() / health_check()
    - get_session() for reads, get_transaction() for every write
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _settings: Optional[_EngineSettings] = None
    _init_lock: asyncio.Lock = asyncio.Lock()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    @classmethod
    async def initialize(cls, database_url: Optional[str] = None) -> None:
        """
        Create the engine and session factory.

        Idempotent: a second call returns immediately, even with a different
        ``database_url``. Call ``shutdown()`` first to switch databases.

        Raises
        ------
        DatabaseInitializationError
            If the URL is missing or the engine cannot be created.
        """
        async with cls._init_lock:
            if cls._engine is not None:
                logger.debug("DatabaseService already initialized; skipping")
                return

            try:
                settings = _settings_for(database_url)
                cls._engine = create_async_engine(settings.url, **settings.engine_kwargs())
                cls._session_factory = async_sessionmaker(
                    bind=cls._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )
                cls._settings = settings

            except Exception as exc:
                cls._engine = None
                cls._session_factory = None
                cls._settings = None
                logger.error(
                    "DatabaseService initialization failed",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                if isinstance(exc, DatabaseInitializationError):
                    raise
                raise DatabaseInitializationError(
                    f"Database initialization failed: {exc}"
                ) from exc

            logger.info(
                "DatabaseService initialized",
                extra={"url_scheme": settings.scheme, "pool_class": settings.pool_class.__name__},
            )

    @classmethod
    async def create_schema(cls) -> None:
        """Create every ledger table that does not exist yet."""
        engine = cls._require_engine()

        # Imported here so that every model is registered on the metadata.
        from tapledger.core.database.base import Base
        import tapledger.database.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database schema ensured", extra={"tables": sorted(Base.metadata.tables)})

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine. Safe to call when not initialized."""
        async with cls._init_lock:
            if cls._engine is None:
                return

            try:
                await cls._engine.dispose()
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._settings = None

            logger.info("DatabaseService shutdown complete")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    @classmethod
    async def health_check(cls) -> bool:
        """``SELECT 1``; False instead of raising when unreachable or uninitialized."""
        if cls._engine is None:
            logger.warning("Health check called on uninitialized DatabaseService")
            return False

        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except DBAPIError as exc:
            logger.warning(
                "Database health check failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False
        return True

    # ========================================================================
    # Sessions
    # ========================================================================

    @classmethod
    def _require_engine(cls) -> AsyncEngine:
        if cls._engine is None or cls._session_factory is None or cls._settings is None:
            raise DatabaseNotInitializedError(
                "DatabaseService must be initialized before use. "
                "Call DatabaseService.initialize() during startup."
            )
        return cls._engine

    @classmethod
    async def _open(cls) -> AsyncSession:
        cls._require_engine()
        assert cls._session_factory is not None and cls._settings is not None

        session = cls._session_factory()
        if cls._settings.is_postgres:
            await session.execute(
                text(f"SET LOCAL statement_timeout = {Config.DATABASE_STATEMENT_TIMEOUT_MS}")
            )
        return session

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session for reads. Never commits.

        Raises
        ------
        DatabaseNotInitializedError
            If ``initialize()`` has not run.
        """
        session = await cls._open()
        try:
            yield session
        finally:
            await session.close()

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in one atomic transaction.

        Commits when the block exits normally. On any exception everything is
        rolled back and the exception is re-raised; ledger rule rejections
        are logged at debug level, anything else as an error.

        Raises
        ------
        DatabaseNotInitializedError
            If ``initialize()`` has not run.
        """
        session = await cls._open()
        try:
            yield session
            await session.commit()

        except LedgerDomainException as exc:
            await session.rollback()
            logger.debug(
                "Transaction rejected by ledger rule; rolled back",
                extra={"error_code": exc.error_code},
            )
            raise

        except Exception as exc:
            await session.rollback()
            logger.error(
                "Transaction failed; rolled back",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise

        finally:
            await session.close()
