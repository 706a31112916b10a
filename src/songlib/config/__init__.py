"""Configuration module for songlib."""

from .settings import (
    ApiSettings,
    DatabaseSettings,
    MusicInfoSettings,
    ObservabilitySettings,
    Settings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "DatabaseSettings",
    "MusicInfoSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
