"""API router initialization."""

# The song routes keep the original /song/... paths; health sits at the root.

from fastapi import APIRouter

from songlib.api.routers import health, songs

api_router = APIRouter()

api_router.include_router(songs.router, prefix="/song", tags=["Songs"])
api_router.include_router(health.router, tags=["Health"])

__all__ = ["api_router"]
