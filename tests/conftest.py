"""Shared fixtures for songlib tests."""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from songlib.config import DatabaseSettings
from songlib.infrastructure.observability import get_request_logger
from songlib.infrastructure.persistence import Database, SongRepository


@pytest.fixture
def request_logger() -> logging.LoggerAdapter:
    """Request-scoped logger as the HTTP layer would build it."""
    return get_request_logger(correlation_id="test-correlation-id", path="/test")


@pytest.fixture
def database_settings(tmp_path: Path) -> DatabaseSettings:
    """Settings for a throwaway SQLite file."""
    return DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'songlib-test.db'}")


@pytest.fixture
async def database(database_settings: DatabaseSettings) -> AsyncGenerator[Database, None]:
    """Database with all tables created, closed after the test."""
    db = Database(database_settings)
    await db.create_tables()
    yield db
    await db.drop_tables()
    await db.close()


@pytest.fixture
def repository(database: Database) -> SongRepository:
    """Song repository over the test database."""
    return SongRepository(database)
