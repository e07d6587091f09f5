"""Database Session Manager: async connection pool with automatic rollback.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions and driver socket errors (OSError) mapped to
      StorageError (core/errors.py)

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from car_service.core.errors import StorageError

logger = logging.getLogger(__name__)


def to_storage_error(
    exc: SQLAlchemyError | OSError, operation: str,
) -> StorageError:
    """Map a SQLAlchemy or socket-level exception to StorageError, keeping the driver's message."""
    detail = str(getattr(exc, "orig", None) or exc)
    if isinstance(exc, OSError):
        # asyncpg raises connect failures (e.g. ConnectionRefusedError) unwrapped
        kind = "store unreachable"
    elif isinstance(exc, IntegrityError):
        kind = "integrity constraint violated"
    elif isinstance(exc, OperationalError):
        kind = "connection or operational error"
    elif isinstance(exc, DBAPIError):
        kind = "database driver error"
    else:
        kind = "database operation failed"
    logger.error(
        f"DB {kind} during {operation}: {detail}",
        extra={"operation": operation},
    )
    return StorageError(f"{kind}: {detail}", operation)


class DatabaseSessionManager:
    """Manages async database sessions with pooling and rollback."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
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
        except (SQLAlchemyError, OSError) as e:
            await session.rollback()
            raise to_storage_error(e, "session") from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
