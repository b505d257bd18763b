"""
SIA API: Database Session Management
====================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   `Database` owns one async engine built from `Settings`. `create_app()`
       stores the instance on `app.state.database`; `get_db_session` hands
       each request its own session that commits on success and rolls back
       on error.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (local runs, tests) skip the pool arguments and let
    SQLAlchemy pick its default pool for the dialect.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, AsyncIterator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from sia_api.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which alembic reads for migrations and
    `Database.create_all()` uses for local/test schemas.
    """
    pass


class Database:
    """Engine + session factory bound to one `Settings` instance."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
            **self._engine_options(settings),
        )
        # expire_on_commit=False: attributes stay readable after commit
        # without another round trip (required for async sessions).
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _engine_options(settings: Settings) -> Dict[str, Any]:
        if settings.is_sqlite:
            return {}
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
            "pool_recycle": 3600,
        }

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yields a session scoped to one unit of work.

        On success: commits. On any error: rolls back and re-raises so the
        global error handler can respond. Always closes the session.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ping(self) -> bool:
        """Lightweight connectivity check used by the health endpoint."""
        try:
            await self._probe()
        except (OSError, SQLAlchemyError) as e:
            logger.warning("Database ping failed: %s", e)
            return False
        return True

    async def wait_until_ready(self) -> None:
        """
        Blocks startup until the database answers `SELECT 1`.

        Retries with exponential backoff + jitter; the last error is
        re-raised once `retry_max_attempts` is exhausted.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((OSError, SQLAlchemyError)),
            stop=stop_after_attempt(self._settings.retry_max_attempts),
            wait=wait_exponential_jitter(
                initial=self._settings.retry_min_wait,
                max=self._settings.retry_max_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await self._probe()

    async def _probe(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Creates every table registered on `Base.metadata` if missing."""
        # Importing the models package registers all tables with Base.
        import sia_api.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/roles")
        async def list_roles(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
