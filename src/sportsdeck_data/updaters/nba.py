"""
NBA updater.

Refreshes the 30 franchises, then totals and advanced tables for the run's
season and phase. The league run succeeds only when both categories do.
"""

from __future__ import annotations

import asyncio
import logging

from ..core.http import ExternalAPIError
from ..core.types import League, StatCategory
from ..pipeline.resolver import resolve_records
from ..pipeline.run_config import RunConfig
from ..providers.nba_api import NbaStatsClient, nba_teams
from ..repositories.base import RepositorySet
from .base import LeagueUpdater
from .common import CategoryOutcome, UpdateResult

logger = logging.getLogger(__name__)


class NbaUpdater(LeagueUpdater):
    """NBA totals + advanced updater."""

    league = League.NBA
    categories = (StatCategory.totals, StatCategory.advanced)

    def __init__(self, client: NbaStatsClient, repos: RepositorySet):
        super().__init__(client, repos)
        self.client: NbaStatsClient = client

    async def run(self, run: RunConfig) -> UpdateResult:
        logger.info("Updating NBA %s %s season", run.season, run.phase.value)
        result = UpdateResult(league=self.league, season=run.season, phase=run.phase)
        result.teams_upserted = self._upsert_teams(nba_teams(), run)

        for index, category in enumerate(self.categories):
            if index:
                await asyncio.sleep(self.client.CATEGORY_DELAY_SECONDS)
            outcome = await self.update_category(category, run)
            result.categories.append(outcome)
            if outcome.error:
                result.errors.append(f"{category.value}: {outcome.error}")

        result.success = all(o.success for o in result.categories)
        logger.info(
            "NBA %s %s update %s",
            run.season, run.phase.value, "succeeded" if result.success else "failed",
        )
        return result

    async def update_category(self, category: StatCategory, run: RunConfig) -> CategoryOutcome:
        """Fetch, resolve and merge one category; failures leave stored data alone."""
        outcome = CategoryOutcome(category=category)
        endpoint = self.client.endpoint(category, run.phase, run.season)

        try:
            fetched = await self.fetcher.fetch_all(endpoint)
        except ExternalAPIError as e:
            return self._fetch_failed(outcome, run, e)

        outcome.records_fetched = len(fetched.records)
        outcome.partial = fetched.partial

        records = self._build_records(
            fetched.records,
            lambda raw: self.client.to_record(raw, category, run.season),
        )
        if not records:
            logger.warning("NBA %s %s returned no usable rows", category.value, run.season)

        self._merge_players(resolve_records(records), category, run, outcome)
        outcome.success = True

        logger.info(
            "NBA %s: %d rows, %d players merged, %d linked",
            category.value, outcome.records_fetched, outcome.players_merged, outcome.players_linked,
        )
        return outcome
