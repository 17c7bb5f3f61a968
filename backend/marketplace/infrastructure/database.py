"""Database Session Manager — one async engine per process, sessions handed to FastAPI routes.

Invariants:
    - A session that raises rolls back before it closes
    - SQLAlchemy failures surface as DatabaseError (503), constraint hits included
    - Services own commits; the manager never commits on their behalf

Design Decisions:
    - Module-level db_manager set by init_db in the lifespan; tests swap it out
    - SQLite URLs skip pool sizing: aiosqlite picks its own pool class
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import func, select

from marketplace.core.errors import DatabaseError
from marketplace.db.base import Base
import marketplace.models  # noqa: F401  registers tables on Base.metadata
from marketplace.models.item import Item

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Engine, session factory and schema bootstrap for the marketplace tables."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; roll back and map the error if the body raises."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}", extra={"error_code": "DATABASE_ERROR"})
            raise DatabaseError("Constraint violated", "commit")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"DB error: {e}", extra={"error_code": "DATABASE_ERROR"})
            raise DatabaseError(type(e).__name__, "execute")
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create missing tables (development / SQLite). Production uses alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def count_items(self) -> int | None:
        """Readiness check: item count, or None when the database is unreachable."""
        try:
            async with self.session() as db:
                return (await db.execute(
                    select(func.count()).select_from(Item),
                )).scalar_one()
        except (DatabaseError, OSError) as e:
            logger.error(f"DB readiness check failed: {e}")
            return None

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
