"""Tests for API dependency providers."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

from songlib.api.dependencies import (
    get_database,
    get_logger,
    get_music_info_client,
    get_song_repository,
    get_song_service,
)
from songlib.config import MusicInfoSettings, Settings
from songlib.domain.entities import EnrichmentFailurePolicy
from songlib.domain.ports import IMusicInfoClient, ISongRepository
from songlib.infrastructure.persistence import Database, SongRepository


def _request(**state: object) -> MagicMock:
    request = MagicMock()
    request.app.state = SimpleNamespace(**state)
    request.method = "GET"
    request.url.path = "/song/all"
    return request


class TestStateDependencies:
    """Test providers that read app.state."""

    def test_database_not_initialized(self) -> None:
        """Test a missing db answers 503."""
        with pytest.raises(HTTPException) as exc_info:
            get_database(_request())
        assert exc_info.value.status_code == 503

    def test_music_info_client_not_initialized(self) -> None:
        """Test a missing client answers 503."""
        with pytest.raises(HTTPException) as exc_info:
            get_music_info_client(_request())
        assert exc_info.value.status_code == 503

    def test_database_from_state(self) -> None:
        """Test the db on app.state is returned."""
        db = MagicMock(spec=Database)
        assert get_database(_request(db=db)) is db


def test_song_repository_wraps_database() -> None:
    """Test the repository is built over the given database."""
    assert isinstance(get_song_repository(MagicMock(spec=Database)), SongRepository)


def test_song_service_uses_configured_policy() -> None:
    """Test the enrichment policy comes from settings."""
    settings = Settings(
        _env_file=None,
        music_info=MusicInfoSettings(enrichment_policy=EnrichmentFailurePolicy.STRICT),
    )

    service = get_song_service(
        AsyncMock(spec=ISongRepository), AsyncMock(spec=IMusicInfoClient), settings
    )

    assert service._enrichment_policy is EnrichmentFailurePolicy.STRICT


def test_logger_carries_request_context() -> None:
    """Test the request logger gets method and path."""
    adapter = get_logger(_request())

    assert adapter.extra["method"] == "GET"
    assert adapter.extra["path"] == "/song/all"
