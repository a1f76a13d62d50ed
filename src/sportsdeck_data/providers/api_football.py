"""
API-Football (api-sports.io v3) client for the English Premier League.

Endpoints used:
    /standings?league=39&season=YYYY         table with one row per club
    /players?team=ID&season=YYYY&page=N      squad stats, paginated via paging.total

Each player row carries a ``statistics`` list (one entry per competition
and club); the entry for the configured league and season is used.
"""

import logging
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.models import SoccerSeasonStats, Standings, TeamModel
from ..core.types import League, StatCategory
from .base import Endpoint, MalformedResponseError, PageDelay, Pagination, PlayerStatRecord, dig

logger = logging.getLogger(__name__)

PREMIER_LEAGUE_ID = 39


def _int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ApiFootballClient(BaseApiClient):
    """API-Football client scoped to one league."""

    BASE_URL = "https://v3.football.api-sports.io"

    # Provider-mandated pauses (free tier allows a handful of calls per minute)
    PAGE_DELAY = PageDelay(base=0.5, even_page=1.0)
    TEAM_DELAY_SECONDS = 0.5

    def __init__(
        self,
        api_key: Optional[str],
        *,
        league_id: int = PREMIER_LEAGUE_ID,
        base_url: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            base_url=base_url,
            headers={"x-apisports-key": api_key or ""},
            **kwargs,
        )
        self.api_key = api_key
        self.league_id = league_id

    def is_configured(self) -> bool:
        return bool(self.api_key)

    # =========================================================================
    # Standings / teams
    # =========================================================================

    async def get_standings(self, season: int) -> list[TeamModel]:
        """
        Fetch the league table and return one team row per club.

        Raises:
            ExternalAPIError: On transport failure
            MalformedResponseError: If the table is missing from the body
        """
        body = await self._get("/standings", {"league": self.league_id, "season": season})
        return self.parse_standings(body)

    @staticmethod
    def parse_standings(body: Any) -> list[TeamModel]:
        response = dig(body, ("response",))
        if not isinstance(response, list) or not response:
            raise MalformedResponseError("/standings: empty response array")

        tables = dig(response[0], ("league", "standings"))
        if not isinstance(tables, list) or not tables or not isinstance(tables[0], list):
            raise MalformedResponseError("/standings: missing league.standings table")

        teams = []
        for row in tables[0]:
            team = row.get("team") or {}
            if team.get("id") is None or not team.get("name"):
                logger.warning("Skipping standings row without team id/name: %s", row)
                continue
            record = row.get("all") or {}
            teams.append(
                TeamModel(
                    league=League.EPL,
                    team_id=str(team["id"]),
                    name=team["name"],
                    display_name=team["name"],
                    logo=team.get("logo"),
                    standings=Standings(
                        rank=row.get("rank"),
                        points=row.get("points"),
                        played=record.get("played") or 0,
                        wins=record.get("win") or 0,
                        losses=record.get("lose") or 0,
                        draws=record.get("draw") or 0,
                    ),
                )
            )
        return teams

    # =========================================================================
    # Players
    # =========================================================================

    def players_endpoint(self) -> Endpoint:
        return Endpoint(
            path="/players",
            records_key="response",
            pagination=Pagination.pages,
            total_pages_path=("paging", "total"),
            delay=self.PAGE_DELAY,
        )

    @staticmethod
    def players_params(team_id: str, season: int) -> dict[str, Any]:
        return {"team": team_id, "season": season}

    def select_statistics(
        self,
        statistics: list[dict[str, Any]],
        season: int,
        team_id: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Pick the statistics entry for this league and season.

        Prefers the entry for the club being fetched, then any entry for the
        league/season, then the first entry.
        """
        if not statistics:
            return None

        in_league = [
            s for s in statistics
            if dig(s, ("league", "id")) == self.league_id
            and _int(dig(s, ("league", "season"))) in (season, None)
        ]
        if team_id is not None:
            for entry in in_league:
                if str(dig(entry, ("team", "id"))) == str(team_id):
                    return entry
        if in_league:
            return in_league[0]
        return statistics[0]

    @staticmethod
    def to_stat_line(entry: dict[str, Any]) -> SoccerSeasonStats:
        games = entry.get("games") or {}
        goals = entry.get("goals") or {}
        cards = entry.get("cards") or {}
        shots = entry.get("shots") or {}
        passes = entry.get("passes") or {}
        tackles = entry.get("tackles") or {}
        duels = entry.get("duels") or {}
        dribbles = entry.get("dribbles") or {}
        fouls = entry.get("fouls") or {}
        penalty = entry.get("penalty") or {}

        return SoccerSeasonStats.model_validate({
            # provider spells it "appearences"
            "appearances": _int(games.get("appearences")) or 0,
            "lineups": _int(games.get("lineups")),
            "minutes": _int(games.get("minutes")),
            "rating": games.get("rating"),
            "goals": {
                "total": goals.get("total"),
                "assists": goals.get("assists"),
                "conceded": goals.get("conceded"),
                "saves": goals.get("saves"),
            },
            "cards": {
                "yellow": cards.get("yellow"),
                "yellowred": cards.get("yellowred"),
                "red": cards.get("red"),
            },
            "shots": {"total": shots.get("total"), "on": shots.get("on")},
            "passes": {
                "total": passes.get("total"),
                "key": passes.get("key"),
                "accuracy": passes.get("accuracy"),
            },
            "tackles": {
                "total": tackles.get("total"),
                "blocks": tackles.get("blocks"),
                "interceptions": tackles.get("interceptions"),
            },
            "duels": {"total": duels.get("total"), "won": duels.get("won")},
            "dribbles": {
                "attempts": dribbles.get("attempts"),
                "success": dribbles.get("success"),
                "past": dribbles.get("past"),
            },
            "fouls": {"drawn": fouls.get("drawn"), "committed": fouls.get("committed")},
            "penalty": {
                "won": penalty.get("won"),
                # provider spells it "commited"
                "committed": penalty.get("commited", penalty.get("committed")),
                "scored": penalty.get("scored"),
                "missed": penalty.get("missed"),
                "saved": penalty.get("saved"),
            },
        })

    def to_record(
        self,
        raw: dict[str, Any],
        team: TeamModel,
        season: int,
        record_id: int,
    ) -> Optional[PlayerStatRecord]:
        """
        Normalize one squad row fetched for ``team``.

        Returns None when the player has no statistics entry at all.
        ``record_id`` is the fetch sequence number: later fetches rank as
        more recent when choosing a player's current club.
        """
        player = raw.get("player") or {}
        entry = self.select_statistics(raw.get("statistics") or [], season, team.team_id)
        if entry is None:
            return None

        games = entry.get("games") or {}
        return PlayerStatRecord(
            player_id=player.get("id") or "",
            player_name=player.get("name") or "",
            season=season,
            category=StatCategory.season,
            stats=self.to_stat_line(entry),
            team=team.name,
            team_id=team.team_id,
            record_id=record_id,
            position=games.get("position"),
            age=_int(player.get("age")),
            profile={
                "firstname": player.get("firstname"),
                "lastname": player.get("lastname"),
                "nationality": player.get("nationality"),
                "height": player.get("height"),
                "weight": player.get("weight"),
                "photo": player.get("photo"),
                "number": games.get("number"),
            },
        )
