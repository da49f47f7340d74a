"""
Shared database handle management.

LAZY, SHARED, RECOVERABLE
=========================

Every repository works against one process-wide handle (an async engine plus
its session factory). The handle is expensive to build and must not be built
twice when a burst of cold requests arrives together, so:

  1. The first acquire() starts a single establishment task.
  2. Callers arriving before it finishes await that same task (a connection
     storm would otherwise open one pool per caller).
  3. If establishment fails, every waiter sees ConnectionUnavailable and the
     in-flight task is dropped, so the next acquire() starts a fresh attempt.
  4. Once established, the handle is returned immediately with no per-call
     health check; the engine's own pool deals with stale connections.

The manager is an ordinary object handed to repositories through their
constructors. get_connection_manager() only exists so a process can share
one instance without threading it through every call site.
"""

import asyncio
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from devevent import models  # noqa: F401 - registers tables on Base.metadata
from devevent.core.config import Settings, get_settings
from devevent.core.errors import ConnectionUnavailable
from devevent.core.logging import get_logger
from devevent.core.metrics import record_connection_attempt
from devevent.db.base import Base

logger = get_logger(__name__)


@dataclass(frozen=True)
class DatabaseHandle:
    engine: AsyncEngine
    session: async_sessionmaker[AsyncSession]


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    # SQLite ships with foreign keys off; bookings rely on the events FK
    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class ConnectionManager:
    """Owns the one shared DatabaseHandle for a process."""

    def __init__(
        self,
        database_url: str,
        *,
        create_schema: bool = False,
        engine_factory: Callable[..., AsyncEngine] = create_async_engine,
        **engine_options: Any,
    ) -> None:
        self._database_url = database_url
        self._url = make_url(database_url)
        self._create_schema = create_schema
        self._engine_factory = engine_factory
        self._engine_options = engine_options
        self._handle: Optional[DatabaseHandle] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def is_connected(self) -> bool:
        return self._handle is not None

    async def acquire(self) -> DatabaseHandle:
        """Return the shared handle, establishing it on first use."""
        if self._handle is not None:
            return self._handle

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._establish())
        pending = self._pending

        try:
            # Shielded: a waiter that gets cancelled must not cancel the attempt
            # the other waiters are sharing.
            handle = await asyncio.shield(pending)
        except ConnectionUnavailable:
            if self._pending is pending:
                self._pending = None
            raise

        self._handle = handle
        if self._pending is pending:
            self._pending = None
        return handle

    async def dispose(self) -> None:
        """Close the engine. A later acquire() builds a fresh handle."""
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.engine.dispose()
            logger.info("db_connection_disposed")

    async def _establish(self) -> DatabaseHandle:
        url = self._url
        engine: Optional[AsyncEngine] = None
        try:
            engine = self._engine_factory(self._database_url, **self._engine_options)
            if url.get_backend_name() == "sqlite":
                _enable_sqlite_foreign_keys(engine)

            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                if self._create_schema:
                    await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            record_connection_attempt(established=False)
            logger.error(
                "db_connection_failed",
                url=url.render_as_string(hide_password=True),
                error=str(e),
            )
            if engine is not None:
                await engine.dispose()
            raise ConnectionUnavailable(str(e)) from e

        record_connection_attempt(established=True)
        logger.info(
            "db_connected",
            url=url.render_as_string(hide_password=True),
            schema_created=self._create_schema,
        )
        return DatabaseHandle(
            engine=engine,
            session=async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
        )


def engine_options(settings: Settings) -> dict[str, Any]:
    """Pool tuning from settings. SQLite pools take no sizing options."""
    if make_url(settings.DATABASE_URL).get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


@lru_cache()
def get_connection_manager() -> ConnectionManager:
    settings = get_settings()
    return ConnectionManager(
        settings.DATABASE_URL,
        create_schema=settings.DB_CREATE_SCHEMA,
        echo=settings.DEBUG,
        **engine_options(settings),
    )
