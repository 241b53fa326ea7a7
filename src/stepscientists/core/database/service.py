"""
Database Service - Core Infrastructure Layer

Purpose
-------
Centralized async database engine and session management. Provides atomic
transactions and pessimistic locking so that every write to one player's
progress is serialized.

Responsibilities
----------------
- Initialize and manage a single AsyncEngine instance
- Provide async context managers for read-only sessions and atomic transactions
- Enforce transaction discipline: automatic commit on success, rollback on exception
- Support pessimistic row locking via `get_locked_entity()`
- Create the schema for local/dev databases (`create_schema()`)
- Expose a lightweight health check

Non-Responsibilities
--------------------
- Database migrations (out of scope; `create_schema()` is create-if-missing only)
- Domain logic or game rules
- Retry policies for transient failures

Architecture Notes
------------------
**Transaction Model**:
- `get_transaction()` is the primary interface for all state mutations
- Automatic commit on success, rollback on any exception
- Never manually call `session.commit()` inside service code

**Connection Pooling**:
- AsyncAdaptedQueuePool for server databases (pool size / overflow / recycle from Config)
- StaticPool for in-memory sqlite, so every session sees the same database
- Default pool for file-based sqlite

Usage Example
-------------
>>> async with DatabaseService.get_transaction() as session:
>>>     row = await DatabaseService.get_locked_entity(session, PlayerProgress, player_id)
>>>     row.cells += 5
>>>     # Automatic commit on exit

Error Handling
--------------
**DatabaseInitializationError** - DATABASE_URL missing or engine creation failed.
**DatabaseNotInitializedError** - session requested before initialize() or after shutdown().
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional, Type, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from stepscientists.core.config.config import Config
from stepscientists.core.database.base import Base
from stepscientists.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# ============================================================================
# Exceptions
# ============================================================================


class DatabaseInitializationError(RuntimeError):
    """Raised when database engine initialization fails."""


class DatabaseNotInitializedError(RuntimeError):
    """Raised when database operations are attempted before initialization."""


# ============================================================================
# Configuration Snapshot
# ============================================================================


@dataclass(frozen=True)
class _DatabaseConfigSnapshot:
    url: str
    echo: bool
    pool_size: int
    max_overflow: int
    pool_recycle: int

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (":memory:" in self.url or self.url.endswith("://"))

    @property
    def url_scheme(self) -> str:
        return self.url.split(":", 1)[0] if ":" in self.url else "unknown"


# ============================================================================
# DatabaseService
# ============================================================================


class DatabaseService:
    """
    Centralized async database engine and session management.

    Public API
    ----------
    - initialize(url=None) / shutdown()
    - get_session() -> read-only session
    - get_transaction() -> atomic write transaction (preferred)
    - get_locked_entity() -> SELECT ... FOR UPDATE by primary key
    - create_schema() -> create all tables that do not exist yet
    - health_check()
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _config_snapshot: Optional[_DatabaseConfigSnapshot] = None
    _init_lock: asyncio.Lock = asyncio.Lock()

    # ========================================================================
    # Initialization & Shutdown
    # ========================================================================

    @classmethod
    def _build_config_snapshot(cls, url: Optional[str]) -> _DatabaseConfigSnapshot:
        database_url = url or getattr(Config, "DATABASE_URL", None)
        if not database_url or not isinstance(database_url, str):
            logger.error("DATABASE_URL is not configured or invalid")
            raise DatabaseInitializationError(
                "DATABASE_URL must be configured as a non-empty string"
            )

        return _DatabaseConfigSnapshot(
            url=database_url,
            echo=bool(Config.DATABASE_ECHO),
            pool_size=int(Config.DATABASE_POOL_SIZE),
            max_overflow=int(Config.DATABASE_MAX_OVERFLOW),
            pool_recycle=int(Config.DATABASE_POOL_RECYCLE),
        )

    @classmethod
    async def initialize(cls, url: Optional[str] = None) -> None:
        """
        Initialize the database engine and session factory.

        Idempotent: returns immediately when already initialized.

        Parameters
        ----------
        url:
            Override for Config.DATABASE_URL (tests pass an in-memory sqlite URL).

        Raises
        ------
        DatabaseInitializationError
            If configuration is invalid or engine creation fails.
        """
        async with cls._init_lock:
            if cls._engine is not None:
                logger.debug("DatabaseService already initialized; skipping")
                return

            logger.info("Initializing DatabaseService")

            try:
                config = cls._build_config_snapshot(url)

                engine_kwargs: dict[str, Any] = {"echo": config.echo}
                if config.is_memory:
                    engine_kwargs["poolclass"] = StaticPool
                elif not config.is_sqlite:
                    engine_kwargs.update(
                        {
                            "poolclass": AsyncAdaptedQueuePool,
                            "pool_size": config.pool_size,
                            "max_overflow": config.max_overflow,
                            "pool_recycle": config.pool_recycle,
                            "pool_pre_ping": True,
                        }
                    )

                cls._engine = create_async_engine(config.url, **engine_kwargs)
                cls._session_factory = async_sessionmaker(
                    bind=cls._engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                )
                cls._config_snapshot = config

                logger.info(
                    "DatabaseService initialized successfully",
                    extra={
                        "url_scheme": config.url_scheme,
                        "pool_class": cls._engine.pool.__class__.__name__,
                    },
                )

            except Exception as exc:
                logger.error(
                    "DatabaseService initialization failed",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )
                cls._engine = None
                cls._session_factory = None
                cls._config_snapshot = None
                if isinstance(exc, DatabaseInitializationError):
                    raise
                raise DatabaseInitializationError(
                    f"Database initialization failed: {exc}"
                ) from exc

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine. Safe to call multiple times."""
        async with cls._init_lock:
            if cls._engine is None:
                logger.debug("DatabaseService not initialized; nothing to shutdown")
                return

            logger.info("Shutting down DatabaseService")

            try:
                await cls._engine.dispose()
                logger.info("DatabaseService shutdown complete")
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._config_snapshot = None

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    @classmethod
    async def create_schema(cls) -> None:
        """Create every table registered on Base.metadata that does not exist yet."""
        cls._ensure_initialized()
        assert cls._engine is not None

        # Register the ORM tables on Base.metadata.
        import stepscientists.database.models  # noqa: F401

        async with cls._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info(
            "Database schema ensured",
            extra={"tables": sorted(Base.metadata.tables.keys())},
        )

    # ========================================================================
    # Health Check
    # ========================================================================

    @classmethod
    async def health_check(cls) -> bool:
        """
        Run `SELECT 1` against the engine.

        Returns False instead of raising on failure.
        """
        if cls._engine is None:
            logger.warning("Health check called on uninitialized DatabaseService")
            return False

        start = time.perf_counter()
        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (OperationalError, DBAPIError) as exc:
            logger.warning(
                "Database health check failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False
        finally:
            logger.debug(
                "Database health check completed",
                extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
            )

    # ========================================================================
    # Session & Transaction Context Managers
    # ========================================================================

    @classmethod
    def _ensure_initialized(cls) -> None:
        if cls._session_factory is None or cls._engine is None:
            logger.error("DatabaseService operation attempted before initialization")
            raise DatabaseNotInitializedError(
                "DatabaseService must be initialized before use. "
                "Call DatabaseService.initialize() during startup."
            )

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a database session without automatic commit.

        For read-only work. Writes belong in `get_transaction()`.

        Raises
        ------
        DatabaseNotInitializedError
            If DatabaseService has not been initialized.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                logger.debug("Database session opened (read-only)")
                yield session
            finally:
                logger.debug(
                    "Database session closed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a database session wrapped in an atomic transaction.

        Commits on success; rolls back and re-raises on any exception.

        Raises
        ------
        DatabaseNotInitializedError
            If DatabaseService has not been initialized.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                logger.debug("Database transaction started")
                yield session

                await session.commit()
                logger.debug(
                    "Database transaction committed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

            except (OperationalError, DBAPIError) as exc:
                await session.rollback()
                logger.error(
                    f"{type(exc).__name__} in transaction; rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                    exc_info=True,
                )
                raise

            except Exception as exc:
                await session.rollback()
                logger.debug(
                    "Transaction rolled back",
                    extra={
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                )
                raise

    # ========================================================================
    # Pessimistic Locking Helper
    # ========================================================================

    @classmethod
    async def get_locked_entity(
        cls,
        session: AsyncSession,
        model: Type[T],
        primary_key: Any,
    ) -> Optional[T]:
        """
        Fetch an entity with a pessimistic row lock (SELECT FOR UPDATE).

        Must be used inside `get_transaction()`. sqlite ignores the lock
        clause; its database-level write lock serializes writers instead.
        """
        return await session.get(model, primary_key, with_for_update=True)
