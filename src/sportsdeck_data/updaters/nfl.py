"""
NFL updater.

NFL keeps no per-season detail documents: teams (with standings) and the
player summary rows of the current season are refreshed from BallDontLie.
"""

from __future__ import annotations

import logging

from ..core.http import ExternalAPIError
from ..core.types import League, Phase, StatCategory
from ..pipeline.resolver import resolve_records
from ..pipeline.run_config import RunConfig
from ..providers.balldontlie_nfl import BallDontLieNFL
from ..repositories.base import RepositorySet
from .base import LeagueUpdater
from .common import CategoryOutcome, UpdateResult

logger = logging.getLogger(__name__)


class NflUpdater(LeagueUpdater):
    """NFL teams + summary updater."""

    league = League.NFL
    category = StatCategory.season

    def __init__(self, client: BallDontLieNFL, repos: RepositorySet):
        super().__init__(client, repos)
        self.client: BallDontLieNFL = client

    async def run(self, run: RunConfig) -> UpdateResult:
        """
        Update teams, standings and player summaries.

        Raises:
            ExternalAPIError: If teams or the first stats page cannot be fetched
        """
        logger.info("Updating NFL %s season", run.season)
        result = UpdateResult(league=self.league, season=run.season, phase=run.phase)

        teams = await self.client.get_teams()
        try:
            standings = await self.client.get_standings(run.season)
        except ExternalAPIError as e:
            logger.warning("NFL standings unavailable for %s: %s", run.season, e)
            result.errors.append(f"standings: {e}")
            standings = {}
        for team in teams:
            team.standings = standings.get(team.team_id)
        result.teams_upserted = self._upsert_teams(teams, run)

        outcome = CategoryOutcome(category=self.category)
        fetched = await self.fetcher.fetch_all(
            self.client.season_stats_endpoint(),
            self.client.season_stats_params(run.season, postseason=run.phase == Phase.playoff),
        )
        outcome.records_fetched = len(fetched.records)
        outcome.partial = fetched.partial
        result.errors.extend(fetched.errors)

        records = self._build_records(
            fetched.records,
            lambda raw: self.client.to_record(raw, run.season),
        )
        self._merge_players(resolve_records(records), self.category, run, outcome)

        outcome.success = True
        result.categories.append(outcome)
        result.success = True

        logger.info(
            "NFL %s: %d teams, %d players linked",
            run.season, result.teams_upserted, outcome.players_linked,
        )
        return result
