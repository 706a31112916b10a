"""FastAPI application factory and entry point.

Run with ``python -m songlib.main`` (host/port from API__HOST/API__PORT) or
``uvicorn songlib.main:app``.
"""

import uvicorn
from fastapi import FastAPI

from songlib import __version__
from songlib.api import api_router, register_exception_handlers
from songlib.config import Settings, get_settings
from songlib.infrastructure.lifecycle import lifespan
from songlib.infrastructure.observability import RequestLoggingMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the cached environment settings)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Song Library",
        description="Song catalog with lyrics and metadata enrichment",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if settings.is_production() else "/docs",
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()


def main() -> None:
    """Run the API server."""
    settings = get_settings()
    uvicorn.run(
        "songlib.main:app",
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
