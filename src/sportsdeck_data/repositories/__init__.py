"""
Repository layer for database-agnostic data access.

Usage:
    from sportsdeck_data.repositories import sql_repositories

    repos = sql_repositories(db)
    repos.teams.upsert(team, updated_at=now)
"""

from .base import (
    PlayerRepository,
    PlayerSeasonStatsRepository,
    RepositorySet,
    SystemInfoRepository,
    TeamRepository,
)
from .sql import (
    SqlPlayerRepository,
    SqlPlayerSeasonStatsRepository,
    SqlSystemInfoRepository,
    SqlTeamRepository,
    sql_repositories,
)

__all__ = [
    "TeamRepository",
    "PlayerRepository",
    "PlayerSeasonStatsRepository",
    "SystemInfoRepository",
    "RepositorySet",
    "SqlTeamRepository",
    "SqlPlayerRepository",
    "SqlPlayerSeasonStatsRepository",
    "SqlSystemInfoRepository",
    "sql_repositories",
]
