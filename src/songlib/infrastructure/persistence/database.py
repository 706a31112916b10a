"""Async engine and transactional session scope for the song store."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from songlib.config import DatabaseSettings

logger = logging.getLogger(__name__)

# SQLite busy timeout in seconds, passed to the driver as connect arg.
SQLITE_LOCK_TIMEOUT = 30


def _engine_options(settings: DatabaseSettings, backend: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": settings.echo,
        "pool_pre_ping": settings.pool_pre_ping,
    }
    if backend == "postgresql":
        options["pool_size"] = settings.pool_size
        options["max_overflow"] = settings.max_overflow
        options["pool_timeout"] = settings.pool_timeout
        options["pool_recycle"] = settings.pool_recycle
    elif backend == "sqlite":
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": SQLITE_LOCK_TIMEOUT,
        }
    return options


class Database:
    """Owns the engine (and with it the pool) for the lifetime of the app."""

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings
        self.backend = make_url(settings.url).get_backend_name()

        self._engine = create_async_engine(
            settings.url, **_engine_options(settings, self.backend)
        )
        # group_song rows are removed with their song through ON DELETE CASCADE,
        # which SQLite only honours with the pragma set per connection.
        if self.backend == "sqlite":
            event.listen(self._engine.sync_engine, "connect", _sqlite_foreign_keys_on)

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    # Hey future me, this is the ONLY way the repository touches the pool. One session = one
    # borrowed connection for the whole block: commit on a clean exit, rollback on ANY exit
    # by exception. BaseException, since a cancelled request (client disconnected in
    # the middle of the create transaction) raises CancelledError, which is not an Exception,
    # and that transaction must be rolled back too, not left for GC.
    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session whose work is committed or rolled back as one unit."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose of the engine and every pooled connection."""
        await self._engine.dispose()

    async def create_tables(self) -> None:
        """Create the schema from the ORM models (dev and tests; deployments run Alembic)."""
        from songlib.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        from songlib.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


def _sqlite_foreign_keys_on(dbapi_conn: Any, _connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    logger.debug("SQLite foreign keys enabled for new connection")
