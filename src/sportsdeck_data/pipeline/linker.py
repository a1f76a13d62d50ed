"""
Summary reference linker.

Keeps the lightweight per-player summary row in step with the current
season: team, position, age, a reference to the detail document and a
display-ready stats block derived from the season line.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.models import NbaTotals, NflSeasonStats, PlayerSummary, SoccerSeasonStats, StatLine, parse_stat_block
from ..core.types import League, Phase, StatCategory, get_league_config
from ..repositories.base import PlayerRepository, PlayerSeasonStatsRepository
from .resolver import ResolvedPlayer
from .run_config import RunConfig

logger = logging.getLogger(__name__)

# Category whose line feeds the summary, per league
SUMMARY_CATEGORY = {
    League.NBA: StatCategory.totals,
    League.NFL: StatCategory.season,
    League.EPL: StatCategory.season,
}


def per_game(value: Optional[float], games: int) -> float:
    """``value / games`` to one decimal; 0 when there are no games."""
    if not games or value is None:
        return 0.0
    return round(value / games, 1)


def should_link(run: RunConfig, category: StatCategory) -> bool:
    """Whether a merge of ``category`` in ``run`` refreshes summary rows."""
    if not run.is_current_season:
        return False
    if category != SUMMARY_CATEGORY[run.league]:
        return False
    return run.phase == Phase.regular


def detail_ref(league: League, player_id: str) -> str:
    return f"{league.value}:{player_id}"


# =============================================================================
# Derived stats
# =============================================================================


def _nba_stats(line: NbaTotals) -> dict[str, Any]:
    games = line.game_count
    has_games = bool(games)
    return {
        "games_played": games,
        "games_started": line.games_started or 0,
        "per_game": {
            "minutes": (line.minutes_pg or 0.0) if has_games else 0.0,
            "points": per_game(line.points, games),
            "rebounds": per_game(line.total_rb, games),
            "assists": per_game(line.assists, games),
            "steals": per_game(line.steals, games),
            "blocks": per_game(line.blocks, games),
            "turnovers": per_game(line.turnovers, games),
        },
        "shooting": {
            "fg_pct": (line.field_percent or 0.0) if has_games else 0.0,
            "three_pct": (line.three_percent or 0.0) if has_games else 0.0,
            "ft_pct": (line.ft_percent or 0.0) if has_games else 0.0,
        },
    }


def _soccer_stats(line: SoccerSeasonStats) -> dict[str, Any]:
    games = line.game_count
    return {
        "games_played": games,
        "games_started": line.lineups or 0,
        "totals": {
            "goals": line.goals.total or 0,
            "assists": line.goals.assists or 0,
            "yellow_cards": line.cards.yellow or 0,
            "red_cards": line.cards.red or 0,
            "minutes": line.minutes or 0,
        },
        "per_game": {
            "goals": per_game(line.goals.total, games),
            "assists": per_game(line.goals.assists, games),
            "minutes": per_game(line.minutes, games),
        },
    }


def _nfl_stats(line: NflSeasonStats) -> dict[str, Any]:
    games = line.game_count
    return {
        "games_played": games,
        "per_game": {
            "passing_yards": per_game(line.passing_yards, games),
            "rushing_yards": per_game(line.rushing_yards, games),
            "receiving_yards": per_game(line.receiving_yards, games),
            "receptions": per_game(line.receptions, games),
            "total_tackles": per_game(line.total_tackles, games),
        },
        "totals": {
            "passing_touchdowns": line.passing_touchdowns or 0,
            "rushing_touchdowns": line.rushing_touchdowns or 0,
            "receiving_touchdowns": line.receiving_touchdowns or 0,
            "defensive_sacks": line.defensive_sacks or 0,
            "defensive_interceptions": line.defensive_interceptions or 0,
        },
    }


def derive_summary_stats(line: StatLine) -> dict[str, Any]:
    """
    Build the summary stats block for a season line.

    Raises:
        TypeError: If the line type has no summary form
    """
    if isinstance(line, NbaTotals):
        return _nba_stats(line)
    if isinstance(line, SoccerSeasonStats):
        return _soccer_stats(line)
    if isinstance(line, NflSeasonStats):
        return _nfl_stats(line)
    raise TypeError(f"No summary form for {type(line).__name__}")


# =============================================================================
# Linker
# =============================================================================


class SummaryLinker:
    """Writes summary rows from resolved lines or stored detail documents."""

    def __init__(
        self,
        players: PlayerRepository,
        stats: Optional[PlayerSeasonStatsRepository] = None,
    ):
        self.players = players
        self.stats = stats

    def link(self, resolved: ResolvedPlayer, run: RunConfig) -> PlayerSummary:
        """Upsert the summary row for ``resolved`` and return it."""
        record = resolved.record
        profile = record.profile
        keeps_detail = get_league_config(run.league).keeps_detail

        summary = PlayerSummary(
            league=run.league,
            player_id=resolved.player_id,
            name=resolved.player_name,
            team_id=resolved.team_id,
            position=record.position,
            number=_str(profile.get("number")),
            age=record.age,
            nationality=profile.get("nationality"),
            height=_str(profile.get("height")),
            weight=_str(profile.get("weight")),
            image=profile.get("photo"),
            detail_ref=detail_ref(run.league, resolved.player_id) if keeps_detail else None,
            stats=derive_summary_stats(record.stats),
            last_updated=run.started_at,
        )
        self.players.upsert_summary(summary)
        return summary

    def rebuild_from_detail(
        self,
        league: League,
        player_id: str,
        season: Optional[int] = None,
    ) -> Optional[PlayerSummary]:
        """
        Recompute a summary row from the stored detail document alone.

        Uses the requested regular-phase season, falling back to the most
        recent one. Returns None when there is nothing to link from.
        """
        if self.stats is None:
            raise RuntimeError("rebuild_from_detail needs a stats repository")

        document = self.stats.get_document(league, player_id)
        if document is None:
            logger.info("No detail document for %s %s", league.value, player_id)
            return None

        entry = document.resolve_entry(season, Phase.regular)
        category = SUMMARY_CATEGORY[league]
        block = entry.category(category) if entry else None
        if not block:
            logger.info(
                "No %s block to rebuild summary for %s %s", category.value, league.value, player_id
            )
            return None

        line = parse_stat_block(league, category, block)
        profile = document.profile
        summary = PlayerSummary(
            league=league,
            player_id=player_id,
            name=document.name,
            team_id=entry.team_id,
            position=entry.position,
            number=_str(profile.get("number")),
            age=entry.age,
            nationality=profile.get("nationality"),
            height=_str(profile.get("height")),
            weight=_str(profile.get("weight")),
            image=profile.get("photo"),
            detail_ref=detail_ref(league, player_id),
            stats=derive_summary_stats(line),
            last_updated=entry.last_updated,
        )
        self.players.upsert_summary(summary)
        return summary


def _str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
