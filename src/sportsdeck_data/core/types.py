"""
Core types and constants for sportsdeck data.

This module provides:
- League, Phase and StatCategory enums
- LeagueConfig dataclass for league-specific pipeline settings
- LEAGUE_REGISTRY and the fixed processing order used by the orchestrator
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class League(str, Enum):
    """Supported leagues."""

    NBA = "NBA"
    NFL = "NFL"
    EPL = "EPL"


class Phase(str, Enum):
    """Portion of a season a stat line belongs to."""

    regular = "regular"
    playoff = "playoff"


class StatCategory(str, Enum):
    """Independently refreshed statistic groupings."""

    totals = "totals"
    advanced = "advanced"
    season = "season"


class DetailKind(str, Enum):
    """Shape of the per-player detail document a league keeps."""

    nba = "nba"  # regular + playoff entries, totals/advanced blocks
    soccer = "soccer"  # single phase, one season block


@dataclass(frozen=True)
class LeagueConfig:
    """Static description of how a league moves through the pipeline."""

    id: League
    name: str
    categories: tuple[StatCategory, ...]
    detail_kind: Optional[DetailKind] = None
    phase_selectable: bool = False
    season_selectable: bool = False

    @property
    def keeps_detail(self) -> bool:
        """Whether per-season detail documents are stored for this league."""
        return self.detail_kind is not None


# =============================================================================
# LEAGUE REGISTRY
# =============================================================================

LEAGUE_REGISTRY: dict[League, LeagueConfig] = {
    League.NBA: LeagueConfig(
        id=League.NBA,
        name="National Basketball Association",
        categories=(StatCategory.totals, StatCategory.advanced),
        detail_kind=DetailKind.nba,
        phase_selectable=True,
        season_selectable=True,
    ),
    League.NFL: LeagueConfig(
        id=League.NFL,
        name="National Football League",
        categories=(StatCategory.season,),
    ),
    League.EPL: LeagueConfig(
        id=League.EPL,
        name="English Premier League",
        categories=(StatCategory.season,),
        detail_kind=DetailKind.soccer,
        season_selectable=True,
    ),
}

# Leagues are always processed in this order, one at a time.
LEAGUE_ORDER: tuple[League, ...] = (League.NBA, League.NFL, League.EPL)


def get_league_config(league: str | League) -> LeagueConfig:
    """
    Get configuration for a league.

    Raises:
        ValueError: If league is not a supported league id
    """
    return LEAGUE_REGISTRY[League(league)]
