"""
Core module for sportsdeck data.

This module provides the foundational components:
- Configuration management (config.py)
- Logging setup (logging.py)
- Data models (models.py)
- League registry and enums (types.py)
- Shared HTTP client infrastructure (http.py)

Usage:
    from sportsdeck_data.core import Settings, get_settings
    from sportsdeck_data.core import League, Phase, StatCategory
    from sportsdeck_data.core.http import BaseApiClient, ExternalAPIError
"""

from .config import Settings, get_settings
from .logging import configure_logging
from .models import (
    LedgerEntry,
    NbaAdvanced,
    NbaTotals,
    NflSeasonStats,
    PlayerStatsDocument,
    PlayerSummary,
    SeasonEntry,
    SoccerSeasonStats,
    Standings,
    StatLine,
    TeamModel,
)
from .types import (
    LEAGUE_ORDER,
    LEAGUE_REGISTRY,
    DetailKind,
    League,
    LeagueConfig,
    Phase,
    StatCategory,
    get_league_config,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "configure_logging",
    # Types
    "League",
    "Phase",
    "StatCategory",
    "DetailKind",
    "LeagueConfig",
    "LEAGUE_REGISTRY",
    "LEAGUE_ORDER",
    "get_league_config",
    # Models
    "StatLine",
    "NbaTotals",
    "NbaAdvanced",
    "SoccerSeasonStats",
    "NflSeasonStats",
    "Standings",
    "TeamModel",
    "PlayerSummary",
    "SeasonEntry",
    "PlayerStatsDocument",
    "LedgerEntry",
]
