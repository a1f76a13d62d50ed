"""
EPL updater.

Refreshes the league table, then walks every club's squad pages. Records
from all clubs are resolved together, so a player who moved between two
Premier League clubs ends up with one season line.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.http import ExternalAPIError
from ..core.types import League, StatCategory
from ..pipeline.resolver import resolve_records
from ..pipeline.run_config import RunConfig
from ..providers.api_football import ApiFootballClient
from ..providers.base import PlayerStatRecord
from ..repositories.base import RepositorySet
from .base import LeagueUpdater
from .common import CategoryOutcome, UpdateResult

logger = logging.getLogger(__name__)


class EplUpdater(LeagueUpdater):
    """Premier League season updater."""

    league = League.EPL
    category = StatCategory.season

    def __init__(
        self,
        client: ApiFootballClient,
        repos: RepositorySet,
        *,
        min_appearances: int = 1,
    ):
        super().__init__(client, repos)
        self.client: ApiFootballClient = client
        self.min_appearances = min_appearances

    async def run(self, run: RunConfig) -> UpdateResult:
        """
        Update teams and player seasons.

        Raises:
            ExternalAPIError: If the standings cannot be fetched
        """
        logger.info("Updating EPL %s season", run.season)
        result = UpdateResult(league=self.league, season=run.season, phase=run.phase)

        teams = await self.client.get_standings(run.season)
        result.teams_upserted = self._upsert_teams(teams, run)

        outcome = CategoryOutcome(category=self.category)
        records: list[PlayerStatRecord] = []
        sequence = 0
        failed_teams = 0

        for index, team in enumerate(teams):
            if index:
                await asyncio.sleep(self.client.TEAM_DELAY_SECONDS)
            try:
                fetched = await self.fetcher.fetch_all(
                    self.client.players_endpoint(),
                    self.client.players_params(team.team_id, run.season),
                )
            except ExternalAPIError as e:
                failed_teams += 1
                logger.warning("Failed to fetch squad for %s (%s): %s", team.name, team.team_id, e)
                result.errors.append(f"{team.name}: {e}")
                continue

            outcome.records_fetched += len(fetched.records)
            outcome.partial = outcome.partial or fetched.partial
            result.errors.extend(fetched.errors)

            # fetch order doubles as recency when a player appears for two clubs
            numbered = []
            for raw in fetched.records:
                sequence += 1
                numbered.append((raw, sequence))

            squad = self._build_records(
                numbered,
                lambda item: self.client.to_record(item[0], team, run.season, item[1]),
            )
            records.extend(r for r in squad if r.games >= self.min_appearances)

        if teams and failed_teams == len(teams):
            result.categories.append(
                self._fetch_failed(outcome, run, ExternalAPIError("every squad fetch failed"))
            )
            return result

        self._merge_players(resolve_records(records), self.category, run, outcome)
        outcome.success = True
        result.categories.append(outcome)
        result.success = True

        logger.info(
            "EPL %s: %d teams (%d failed), %d players merged, %d linked",
            run.season, len(teams), failed_teams, outcome.players_merged, outcome.players_linked,
        )
        return result
