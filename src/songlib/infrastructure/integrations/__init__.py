"""External service integrations."""

from songlib.infrastructure.integrations.music_info_client import MusicInfoClient

__all__ = ["MusicInfoClient"]
