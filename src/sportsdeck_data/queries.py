"""
Read helpers over what the pipeline stores.

These back the site's "last updated" banner and the NBA efficiency/usage
chart; both read precomputed rows only.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .core.types import League, Phase, StatCategory
from .orchestrator import GLOBAL_LEDGER_KEY, league_ledger_key
from .repositories.base import PlayerSeasonStatsRepository, SystemInfoRepository

logger = logging.getLogger(__name__)

DEFAULT_MIN_GAMES = 20


def get_last_update(
    ledger: SystemInfoRepository,
    league: Optional[League] = None,
    season: Optional[int] = None,
    phase: Optional[Phase] = None,
) -> Optional[dict[str, Any]]:
    """
    Look up a ledger entry.

    No league: the whole-cycle entry. League only: the league's latest run.
    League and season: that season's latest run. Adding a phase narrows it
    to that phase's latest run (only NBA writes these).
    """
    if league is None:
        return ledger.get(GLOBAL_LEDGER_KEY)
    if season is None:
        return ledger.get(league_ledger_key(league))
    return ledger.get(league_ledger_key(league, season, phase))


def efficiency_usage_points(
    stats: PlayerSeasonStatsRepository,
    season: int,
    phase: Phase = Phase.regular,
    min_games: int = DEFAULT_MIN_GAMES,
) -> list[dict[str, Any]]:
    """
    True-shooting vs. usage points for NBA players of a season.

    Players whose entry has no advanced block, or fewer than ``min_games``
    games in it, are left out.
    """
    points = []
    skipped = 0
    for row in stats.list_category(League.NBA, season, phase, StatCategory.advanced):
        advanced = row["data"]
        if not advanced or (advanced.get("games") or 0) < min_games:
            skipped += 1
            continue
        points.append({
            "player_id": row["player_id"],
            "name": row["name"],
            "team": row["team"],
            "position": row["position"],
            "ts_percent": advanced.get("ts_percent"),
            "usage_percent": advanced.get("usage_percent"),
            "per": advanced.get("per"),
            "games": advanced.get("games"),
        })
    logger.debug("Efficiency/usage %s %s: %d points, %d skipped", season, phase.value, len(points), skipped)
    return points
