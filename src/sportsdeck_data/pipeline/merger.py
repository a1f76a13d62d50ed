"""
Season stat merger.

Upserts one resolved player line into the player's detail document:
the document header and the (season, phase) entry are created on first
sight, entry metadata is overwritten, and only the targeted category block
is replaced. Blocks of other categories are never touched, so a run that
fetches totals cannot disturb advanced numbers and vice versa.
"""

from __future__ import annotations

import logging

from ..core.types import StatCategory, get_league_config
from ..repositories.base import PlayerSeasonStatsRepository
from .resolver import ResolvedPlayer
from .run_config import RunConfig

logger = logging.getLogger(__name__)


class MergeError(Exception):
    """A resolved line cannot be written to the detail document."""


class SeasonStatMerger:
    """Idempotent writer of per-category season blocks."""

    def __init__(self, repository: PlayerSeasonStatsRepository):
        self.repository = repository

    def merge(self, resolved: ResolvedPlayer, category: StatCategory, run: RunConfig) -> None:
        """
        Write ``resolved`` into its (season, phase) entry for ``category``.

        Runs as one transaction. Applying the same line with the same
        ``run`` again leaves the stored state unchanged.

        Raises:
            MergeError: If the line has no player id or the league keeps no detail document
        """
        config = get_league_config(run.league)
        if not config.keeps_detail:
            raise MergeError(f"{run.league.value} does not keep detail documents")
        if category not in config.categories:
            raise MergeError(f"{category.value} is not a {run.league.value} category")
        if not resolved.player_id:
            raise MergeError("resolved line has no player id")

        record = resolved.record
        season = run.season
        stamp = run.started_at

        with self.repository.transaction():
            self.repository.upsert_document(
                run.league,
                resolved.player_id,
                resolved.player_name,
                record.profile,
                stamp,
            )
            self.repository.upsert_entry(
                run.league,
                resolved.player_id,
                season,
                run.phase,
                team=resolved.team,
                team_id=resolved.team_id,
                position=record.position,
                age=record.age,
                updated_at=stamp,
            )
            self.repository.ensure_categories(
                run.league,
                resolved.player_id,
                season,
                run.phase,
                config.categories,
                stamp,
            )
            self.repository.put_category(
                run.league,
                resolved.player_id,
                season,
                run.phase,
                category,
                record.stats.to_block(),
                stamp,
            )

        logger.debug(
            "Merged %s %s %s/%s for %s (%s)",
            run.league.value, category.value, season, run.phase.value,
            resolved.player_name, resolved.player_id,
        )

    def clear(self, category: StatCategory, run: RunConfig) -> int:
        """
        Empty ``category`` for every player of the run's season and phase.

        Only used when preserve-on-failure is switched off.
        """
        if run.preserve_data_on_failure:
            return 0
        cleared = self.repository.clear_category(
            run.league, run.season, run.phase, category, run.started_at
        )
        logger.warning(
            "Cleared %d %s block(s) for %s %s/%s after a failed fetch",
            cleared, category.value, run.league.value, run.season, run.phase.value,
        )
        return cleared
