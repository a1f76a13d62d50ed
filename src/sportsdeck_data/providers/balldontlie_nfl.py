"""
BallDontLie NFL API client.

Provides NFL teams, standings and player season stats via the BallDontLie
API (https://api.balldontlie.io/nfl). Season stats are cursor-paginated.
"""

import logging
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.models import NflSeasonStats, Standings, TeamModel
from ..core.types import League, StatCategory
from .base import Endpoint, MalformedResponseError, PageDelay, Pagination, PlayerStatRecord

logger = logging.getLogger(__name__)


class BallDontLieNFL(BaseApiClient):
    """BallDontLie NFL API client."""

    BASE_URL = "https://api.balldontlie.io/nfl/v1"

    PAGE_DELAY = PageDelay(base=0.25)

    def __init__(self, api_key: Optional[str], *, base_url: Optional[str] = None, **kwargs: Any):
        super().__init__(
            base_url=base_url,
            headers={"Authorization": api_key or ""},
            **kwargs,
        )
        self.api_key = api_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    # =========================================================================
    # Teams
    # =========================================================================

    async def get_teams(self) -> list[TeamModel]:
        """Get all NFL teams."""
        response = await self._get("/teams")
        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, list):
            raise MalformedResponseError("/teams: expected an array at 'data'")

        return [
            TeamModel(
                league=League.NFL,
                team_id=str(team["id"]),
                name=team.get("full_name") or team.get("name") or str(team["id"]),
                display_name=team.get("full_name") or team.get("name") or str(team["id"]),
                abbreviation=team.get("abbreviation"),
                city=team.get("location"),
            )
            for team in data
            if team.get("id") is not None
        ]

    async def get_standings(self, season: int) -> dict[str, Standings]:
        """Get standings keyed by team id."""
        response = await self._get("/standings", {"season": season})
        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, list):
            raise MalformedResponseError("/standings: expected an array at 'data'")

        standings = {}
        for row in data:
            team_id = (row.get("team") or {}).get("id")
            if team_id is None:
                continue
            wins = row.get("wins") or 0
            losses = row.get("losses") or 0
            ties = row.get("ties") or 0
            standings[str(team_id)] = Standings(
                played=wins + losses + ties,
                wins=wins,
                losses=losses,
                draws=ties,
            )
        return standings

    # =========================================================================
    # Season Stats
    # =========================================================================

    def season_stats_endpoint(self) -> Endpoint:
        return Endpoint(
            path="/season_stats",
            records_key="data",
            pagination=Pagination.cursor,
            delay=self.PAGE_DELAY,
        )

    @staticmethod
    def season_stats_params(season: int, postseason: bool = False, per_page: int = 100) -> dict[str, Any]:
        return {
            "season": season,
            "postseason": str(postseason).lower(),
            "per_page": per_page,
        }

    @staticmethod
    def to_record(raw: dict[str, Any], season: int) -> PlayerStatRecord:
        """
        Normalize one season-stats row.

        Raises:
            pydantic.ValidationError: If the stat fields do not parse
        """
        player = raw.get("player") or {}
        team = player.get("team") or {}
        name = " ".join(p for p in (player.get("first_name"), player.get("last_name")) if p)
        team_id = team.get("id")

        return PlayerStatRecord(
            player_id=player.get("id") or "",
            player_name=name,
            season=int(raw.get("season") or season),
            category=StatCategory.season,
            stats=NflSeasonStats.model_validate(raw),
            team=team.get("abbreviation"),
            team_id=str(team_id) if team_id is not None else None,
            position=player.get("position_abbreviation") or player.get("position"),
            age=player.get("age"),
            profile={
                "number": player.get("jersey_number"),
                "height": player.get("height"),
                "weight": player.get("weight"),
            },
        )
