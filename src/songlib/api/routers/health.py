"""Health check endpoint for Docker/Kubernetes probes."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from songlib import __version__

router = APIRouter()


class HealthStatus(BaseModel):
    """Liveness response."""

    status: str = Field(description="Always 'ok' while the app is serving")
    version: str = Field(default=__version__, description="Application version")


@router.get("/health", response_model=HealthStatus)
async def health() -> HealthStatus:
    """Liveness probe."""
    return HealthStatus(status="ok")
