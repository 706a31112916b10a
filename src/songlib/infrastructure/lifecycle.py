"""Application lifecycle management for startup and shutdown tasks.

This module handles the FastAPI lifespan context manager: logging setup, the
database engine and the metadata provider client are created at startup and
released at shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from sqlalchemy.engine import make_url

from songlib.config import Settings, get_settings
from songlib.infrastructure.integrations import MusicInfoClient
from songlib.infrastructure.observability import configure_logging
from songlib.infrastructure.persistence import Database

logger = logging.getLogger(__name__)


# Hey future me, SQLite won't create missing parent directories for the .db file and the
# error you get instead ("unable to open database file") says nothing about the path.
# Create the directory up front and fail with a readable message. No-op for PostgreSQL
# and for in-memory databases.
def _ensure_sqlite_directory(settings: Settings) -> None:
    """Make sure the SQLite database directory exists."""
    url = make_url(settings.database.url)
    if not url.drivername.startswith("sqlite") or not url.database:
        return
    if url.database == ":memory:":
        return

    parent = Path(url.database).parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RuntimeError(
            f"Unable to create SQLite database directory '{parent}': {exc}. "
            "Update DATABASE__URL or adjust directory permissions."
        ) from exc


# Listen future me, everything before `yield` runs at STARTUP, everything after at
# SHUTDOWN. Settings come from app.state (create_app puts them there) so a test app can
# run with its own configuration. The finally block closes whatever was opened, even if
# startup failed halfway.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks including:
    - Logging configuration
    - Database initialization (optionally creating tables)
    - Metadata provider client creation
    - Resource cleanup
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    db: Database | None = None
    music_info_client: MusicInfoClient | None = None
    try:
        _ensure_sqlite_directory(settings)

        db = Database(settings.database)
        app.state.db = db
        logger.info(
            "Database initialized: %s",
            make_url(settings.database.url).render_as_string(hide_password=True),
        )

        if settings.database.create_tables_on_startup:
            await db.create_tables()
            logger.info("Database tables created")

        music_info_client = MusicInfoClient(settings.music_info)
        app.state.music_info_client = music_info_client
        if settings.music_info.url:
            logger.info(
                "Music info provider: %s (policy=%s, timeout=%ss)",
                settings.music_info.url,
                settings.music_info.enrichment_policy.value,
                settings.music_info.timeout,
            )
        else:
            logger.warning(
                "MUSIC_INFO__URL is not set - songs will be added without details"
            )

        yield
    finally:
        logger.info("Shutting down application")
        if music_info_client is not None:
            await music_info_client.close()
        if db is not None:
            await db.close()
        logger.info("Shutdown complete")
