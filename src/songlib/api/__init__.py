"""HTTP API layer: routers, schemas, dependencies and exception handlers."""

from songlib.api.exception_handlers import register_exception_handlers
from songlib.api.routers import api_router

__all__ = ["api_router", "register_exception_handlers"]
