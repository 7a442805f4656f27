"""Application settings using Pydantic Settings for environment-based configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hotboard import __version__

DEFAULT_SOURCES_FILE = Path(__file__).parent / "data" / "sources.json"


class Settings(BaseSettings):
    """
    Central configuration for hotboard.

    All settings can be overridden via environment variables.
    Prefix is not used to allow standard env var names (e.g., LOG_LEVEL).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Storage
    snapshot_dir: Path = Field(default=Path("data"))
    sources_file: Path = Field(default=DEFAULT_SOURCES_FILE)

    # Transport
    user_agent: str = f"hotboard/{__version__} (+feed snapshot)"
    http_timeout_seconds: float = Field(default=10.0, gt=0.0, le=120.0)

    # Orchestration
    run_timeout_seconds: float = Field(default=60.0, gt=0.0)
    max_concurrency: int = Field(default=0, ge=0, description="0 = unlimited")
    cache_ttl_seconds: int = Field(default=300, ge=0)
    watch_interval_seconds: int = Field(default=300, ge=1)

    # Normalization rules
    upstream_success_code: int = 200
    rss_item_cap: int = Field(default=20, ge=1)
    rss_description_limit: int = Field(default=200, ge=1)
    date_window_days: int = Field(default=7, ge=0)
    truncate_length: int = Field(default=40, ge=1)

    # Observability
    metrics_enabled: bool = False
    metrics_port: int = 8000

    # Read-only snapshot API
    api_host: str = "127.0.0.1"
    api_port: int = 8080
    cors_origins: str = "*"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def concurrency_limited(self) -> bool:
        """Check if a bounded worker pool is configured."""
        return self.max_concurrency > 0


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    Clear cache with get_settings.cache_clear() if needed.
    """
    return Settings()
