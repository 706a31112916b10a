"""Dependency injection for API endpoints."""

import logging
from typing import cast

from fastapi import Depends, HTTPException, Request

from songlib.application.services import SongService
from songlib.config import Settings
from songlib.domain.ports import IMusicInfoClient, ISongRepository
from songlib.infrastructure.observability import get_request_logger
from songlib.infrastructure.persistence import Database, SongRepository


# Settings live on app.state (create_app puts them there) so tests can build an app with
# their own Settings instead of fighting the lru_cache in get_settings().
def get_app_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    return cast(Settings, request.app.state.settings)


def get_database(request: Request) -> Database:
    """Get the Database from app state.

    Raises:
        HTTPException: 503 if the database isn't initialized yet
    """
    if not hasattr(request.app.state, "db"):
        raise HTTPException(status_code=503, detail="Database not initialized")
    return cast(Database, request.app.state.db)


def get_music_info_client(request: Request) -> IMusicInfoClient:
    """Get the metadata provider client from app state.

    Raises:
        HTTPException: 503 if the client isn't initialized yet
    """
    if not hasattr(request.app.state, "music_info_client"):
        raise HTTPException(status_code=503, detail="Music info client not initialized")
    return cast(IMusicInfoClient, request.app.state.music_info_client)


def get_song_repository(db: Database = Depends(get_database)) -> ISongRepository:
    """Get song repository instance."""
    return SongRepository(db)


# Yo, the service is cheap to build (three references), so one per request is fine. The
# enrichment policy comes from settings - flip MUSIC_INFO__ENRICHMENT_POLICY=strict to make
# provider failures fail the create request instead of being swallowed.
def get_song_service(
    repository: ISongRepository = Depends(get_song_repository),
    music_info_client: IMusicInfoClient = Depends(get_music_info_client),
    settings: Settings = Depends(get_app_settings),
) -> SongService:
    """Get song service instance."""
    return SongService(
        repository=repository,
        music_info_client=music_info_client,
        enrichment_policy=settings.music_info.enrichment_policy,
    )


def get_logger(request: Request) -> logging.LoggerAdapter:
    """Get the request-scoped logger handed to the catalog service."""
    return get_request_logger(method=request.method, path=request.url.path)
