"""
Stat provider clients.

Each client builds on ``core.http.BaseApiClient`` and turns provider rows
into ``PlayerStatRecord`` instances the pipeline understands.
"""

from .api_football import ApiFootballClient
from .balldontlie_nfl import BallDontLieNFL
from .base import (
    Endpoint,
    MalformedResponseError,
    PageDelay,
    Pagination,
    PlayerStatRecord,
)
from .nba_api import NbaStatsClient, nba_team_id, nba_teams

__all__ = [
    "ApiFootballClient",
    "BallDontLieNFL",
    "NbaStatsClient",
    "Endpoint",
    "MalformedResponseError",
    "PageDelay",
    "Pagination",
    "PlayerStatRecord",
    "nba_team_id",
    "nba_teams",
]
