"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from songlib.domain.entities import EnrichmentFailurePolicy


class DatabaseSettings(BaseModel):
    """Database connection and pool settings."""

    url: str = Field(
        default="sqlite+aiosqlite:///./songlib.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    pool_pre_ping: bool = Field(default=True)
    # Pool settings only apply to PostgreSQL (see Database.__init__)
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: float = Field(default=30.0, gt=0)
    pool_recycle: int = Field(default=1800)
    create_tables_on_startup: bool = Field(
        default=False,
        description="Create tables at startup instead of running Alembic (dev/test only)",
    )


# Hey future me - MUSIC_INFO__URL replaces the old MUSIC_URL env var. An empty url is
# allowed: songs can still be created, they just never get enriched.
class MusicInfoSettings(BaseModel):
    """External song metadata provider settings."""

    url: str = Field(default="", description="Metadata endpoint queried with group/song")
    timeout: float = Field(
        default=5.0, gt=0, description="Overall deadline for one enrichment call (s)"
    )
    enrichment_policy: EnrichmentFailurePolicy = Field(
        default=EnrichmentFailurePolicy.NON_BLOCKING,
        description="What song creation does when enrichment fails",
    )


class ApiSettings(BaseModel):
    """HTTP server and listing settings."""

    host: str = Field(default="localhost")
    port: int = Field(default=8080, ge=1, le=65535)
    default_page_limit: int = Field(default=10, ge=1)
    max_page_limit: int = Field(default=100, ge=1)


class ObservabilitySettings(BaseModel):
    """Logging settings."""

    log_json_format: bool = Field(default=False, description="Emit JSON log lines")


class Settings(BaseSettings):
    """Root settings object.

    Nested values use a double underscore in env vars, e.g.
    ``DATABASE__URL=postgresql+asyncpg://...`` or ``MUSIC_INFO__TIMEOUT=3``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(default="songlib")
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    music_info: MusicInfoSettings = Field(default_factory=MusicInfoSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate the log level name."""
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
