"""
Configuration management for the sportsdeck ingestion pipeline.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables (or a local .env file).
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import Phase

DEFAULT_SQLITE_PATH = Path("statsdb") / "sportsdeck.sqlite"


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Settings are read once when the orchestrator is built and are not
    mutated afterwards. Per-run choices (season, phase) travel in
    ``RunConfig`` instead.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = Field(default="INFO", description="Root log level")

    # ==========================================================================
    # Database Configuration
    # ==========================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string. SQLite is used when unset.",
    )
    database_pool_size: int = Field(default=10, ge=1, le=50)
    sqlite_path: Path = Field(
        default=DEFAULT_SQLITE_PATH,
        description="SQLite database file used when DATABASE_URL is not set",
    )

    # ==========================================================================
    # Provider Configuration
    # ==========================================================================
    nba_api_base_url: str = "http://rest.nbaapi.com/api"
    api_football_base_url: str = "https://v3.football.api-sports.io"
    balldontlie_nfl_base_url: str = "https://api.balldontlie.io/nfl/v1"

    epl_api_key: Optional[str] = Field(
        default=None,
        description="API-Football key (sent as x-apisports-key)",
    )
    balldontlie_api_key: Optional[str] = Field(
        default=None,
        description="BallDontLie API key for NFL data",
    )

    http_timeout: float = Field(default=30.0, gt=0)
    provider_max_retries: int = Field(default=3, ge=1, le=10)
    provider_requests_per_minute: int = Field(default=300, ge=1)

    # ==========================================================================
    # Current Seasons (updated annually)
    # ==========================================================================
    current_season_nba: int = 2025
    current_season_nfl: int = 2024
    current_season_epl: int = 2024

    nba_season_type: Phase = Field(default=Phase.regular, description="regular or playoff")
    epl_league_id: int = 39
    epl_min_appearances: int = Field(default=1, ge=0)

    @computed_field
    @property
    def current_seasons(self) -> dict[str, int]:
        """Get current seasons by league."""
        return {
            "NBA": self.current_season_nba,
            "NFL": self.current_season_nfl,
            "EPL": self.current_season_epl,
        }

    # ==========================================================================
    # Update cycle
    # ==========================================================================
    nba_enabled: bool = True
    nfl_enabled: bool = False
    epl_enabled: bool = True

    preserve_data_on_failure: bool = Field(
        default=True,
        description="Leave stored statistics untouched when a fetch fails",
    )
    display_timezone: str = Field(
        default="America/Chicago",
        description="Timezone used for human-readable ledger timestamps",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
