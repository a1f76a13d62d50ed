"""
Base class for per-league updaters.

An updater owns one provider client and runs the league's
fetch → resolve → merge → link sequence for a single RunConfig.
Failures are isolated at the smallest unit that can fail: one record,
one player, one team squad, one category.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from pydantic import ValidationError

from ..core.http import BaseApiClient
from ..core.models import TeamModel
from ..core.types import League, StatCategory, get_league_config
from ..pipeline.fetcher import PaginatedFetcher
from ..pipeline.linker import SummaryLinker, should_link
from ..pipeline.merger import SeasonStatMerger
from ..pipeline.resolver import ResolvedPlayer
from ..pipeline.run_config import RunConfig
from ..providers.base import PlayerStatRecord
from ..repositories.base import RepositorySet
from .common import CategoryOutcome, UpdateResult

logger = logging.getLogger(__name__)


class LeagueUpdater(ABC):
    """
    Abstract base class for league updaters.

    Subclasses must implement:
    - league: The league this updater refreshes
    - run(): The league's update sequence
    """

    league: League

    def __init__(self, client: BaseApiClient, repos: RepositorySet):
        self.client = client
        self.repos = repos
        self.fetcher = PaginatedFetcher(client)
        self.merger = SeasonStatMerger(repos.stats)
        self.linker = SummaryLinker(repos.players, repos.stats)

    @abstractmethod
    async def run(self, run: RunConfig) -> UpdateResult:
        """Run one update for the league described by ``run``."""
        ...

    async def close(self) -> None:
        await self.client.close()

    # =========================================================================
    # Shared steps
    # =========================================================================

    def _upsert_teams(self, teams: Iterable[TeamModel], run: RunConfig) -> int:
        count = 0
        for team in teams:
            self.repos.teams.upsert(team, run.started_at)
            count += 1
        logger.info("Upserted %d %s teams", count, run.league.value)
        return count

    def _build_records(
        self,
        rows: Iterable[Any],
        convert: Callable[[Any], Optional[PlayerStatRecord]],
    ) -> list[PlayerStatRecord]:
        """Normalize provider rows, skipping rows that do not parse."""
        records = []
        for row in rows:
            try:
                record = convert(row)
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning("Skipping unparseable %s row: %s", self.league.value, e)
                continue
            if record is not None:
                records.append(record)
        return records

    def _merge_players(
        self,
        players: Iterable[ResolvedPlayer],
        category: StatCategory,
        run: RunConfig,
        outcome: CategoryOutcome,
    ) -> None:
        """Merge (and link, where due) every resolved player; one failure never stops the rest."""
        keeps_detail = get_league_config(run.league).keeps_detail
        link = should_link(run, category)

        for player in players:
            outcome.players_resolved += 1
            try:
                if keeps_detail:
                    self.merger.merge(player, category, run)
                    outcome.players_merged += 1
            except Exception as e:
                logger.warning(
                    "Failed to merge %s %s for %s (%s): %s",
                    run.league.value, category.value, player.player_name, player.player_id, e,
                )
                continue

            if not link:
                continue
            try:
                self.linker.link(player, run)
                outcome.players_linked += 1
            except Exception as e:
                logger.warning(
                    "Failed to link summary for %s (%s): %s",
                    player.player_name, player.player_id, e,
                )

    def _fetch_failed(
        self,
        outcome: CategoryOutcome,
        run: RunConfig,
        error: Exception,
    ) -> CategoryOutcome:
        outcome.success = False
        outcome.error = str(error)
        logger.error(
            "Fetching %s %s %s/%s failed: %s",
            run.league.value, outcome.category.value, run.season, run.phase.value, error,
        )
        self.merger.clear(outcome.category, run)
        return outcome
