"""
NBA stats API client.

Wraps the REST NBA API (http://rest.nbaapi.com/api), which serves whole-season
player tables in one response:

    /PlayerDataTotals/season/{season}            regular-season totals
    /PlayerDataTotalsPlayoffs/season/{season}    playoff totals
    /PlayerDataAdvanced/season/{season}          regular-season advanced
    /PlayerDataAdvancedPlayoffs/season/{season}  playoff advanced

A traded player appears once per team plus once as a combined line whose
team label is "2TM", "3TM", ...
"""

import logging
import re
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.models import NbaAdvanced, NbaTotals, TeamModel
from ..core.types import League, Phase, StatCategory
from .base import Endpoint, PlayerStatRecord

logger = logging.getLogger(__name__)

AGGREGATE_TEAM = re.compile(r"^\d+TM$")

# (internal id, full name, abbreviation, city)
NBA_TEAMS: tuple[tuple[int, str, str, str], ...] = (
    (1, "Atlanta Hawks", "ATL", "Atlanta"),
    (2, "Boston Celtics", "BOS", "Boston"),
    (3, "Brooklyn Nets", "BRK", "Brooklyn"),
    (4, "Charlotte Hornets", "CHO", "Charlotte"),
    (5, "Chicago Bulls", "CHI", "Chicago"),
    (6, "Cleveland Cavaliers", "CLE", "Cleveland"),
    (7, "Dallas Mavericks", "DAL", "Dallas"),
    (8, "Denver Nuggets", "DEN", "Denver"),
    (9, "Detroit Pistons", "DET", "Detroit"),
    (10, "Golden State Warriors", "GSW", "San Francisco"),
    (11, "Houston Rockets", "HOU", "Houston"),
    (12, "Indiana Pacers", "IND", "Indianapolis"),
    (13, "Los Angeles Clippers", "LAC", "Los Angeles"),
    (14, "Los Angeles Lakers", "LAL", "Los Angeles"),
    (15, "Memphis Grizzlies", "MEM", "Memphis"),
    (16, "Miami Heat", "MIA", "Miami"),
    (17, "Milwaukee Bucks", "MIL", "Milwaukee"),
    (18, "Minnesota Timberwolves", "MIN", "Minneapolis"),
    (19, "New Orleans Pelicans", "NOP", "New Orleans"),
    (20, "New York Knicks", "NYK", "New York"),
    (21, "Oklahoma City Thunder", "OKC", "Oklahoma City"),
    (22, "Orlando Magic", "ORL", "Orlando"),
    (23, "Philadelphia 76ers", "PHI", "Philadelphia"),
    (24, "Phoenix Suns", "PHO", "Phoenix"),
    (25, "Portland Trail Blazers", "POR", "Portland"),
    (26, "Sacramento Kings", "SAC", "Sacramento"),
    (27, "San Antonio Spurs", "SAS", "San Antonio"),
    (28, "Toronto Raptors", "TOR", "Toronto"),
    (29, "Utah Jazz", "UTA", "Salt Lake City"),
    (30, "Washington Wizards", "WAS", "Washington"),
)

ALTERNATE_ABBREVIATIONS = {"BKN": "BRK", "CHA": "CHO", "PHX": "PHO"}

_TEAM_IDS = {abbr: str(team_id) for team_id, _, abbr, _ in NBA_TEAMS}


def is_aggregate_team(team: Optional[str]) -> bool:
    """True for combined multi-team lines ("2TM", "3TM", ...)."""
    return bool(team) and AGGREGATE_TEAM.match(team.strip().upper()) is not None


def nba_team_id(abbreviation: Optional[str]) -> Optional[str]:
    """Map a team abbreviation (including alternates) to our team id."""
    if not abbreviation:
        return None
    abbr = abbreviation.strip().upper()
    return _TEAM_IDS.get(ALTERNATE_ABBREVIATIONS.get(abbr, abbr))


def nba_teams() -> list[TeamModel]:
    """The 30 NBA franchises as team rows."""
    return [
        TeamModel(
            league=League.NBA,
            team_id=str(team_id),
            name=name,
            display_name=name,
            abbreviation=abbr,
            city=city,
        )
        for team_id, name, abbr, city in NBA_TEAMS
    ]


class NbaStatsClient(BaseApiClient):
    """Client for the REST NBA API season tables."""

    BASE_URL = "http://rest.nbaapi.com/api"

    # Pause between the totals and advanced requests of one run
    CATEGORY_DELAY_SECONDS = 1.0

    _TABLES = {
        (StatCategory.totals, Phase.regular): "PlayerDataTotals",
        (StatCategory.totals, Phase.playoff): "PlayerDataTotalsPlayoffs",
        (StatCategory.advanced, Phase.regular): "PlayerDataAdvanced",
        (StatCategory.advanced, Phase.playoff): "PlayerDataAdvancedPlayoffs",
    }

    _STAT_MODELS = {
        StatCategory.totals: NbaTotals,
        StatCategory.advanced: NbaAdvanced,
    }

    def __init__(self, *, base_url: Optional[str] = None, **kwargs: Any):
        super().__init__(base_url=base_url, **kwargs)

    def endpoint(self, category: StatCategory, phase: Phase, season: int) -> Endpoint:
        """
        Endpoint serving one category/phase for a season.

        Raises:
            KeyError: If the category is not served for NBA
        """
        table = self._TABLES[(category, phase)]
        return Endpoint(path=f"/{table}/season/{season}")

    def to_record(
        self,
        raw: dict[str, Any],
        category: StatCategory,
        season: int,
    ) -> PlayerStatRecord:
        """
        Normalize one provider row.

        Raises:
            pydantic.ValidationError: If the stat fields do not parse
        """
        stats = self._STAT_MODELS[category].model_validate(raw)
        team = raw.get("team")
        return PlayerStatRecord(
            player_id=raw.get("playerId") or "",
            player_name=raw.get("playerName") or "",
            season=int(raw.get("season") or season),
            category=category,
            stats=stats,
            team=team,
            team_id=nba_team_id(team),
            record_id=raw.get("id"),
            position=raw.get("position"),
            age=raw.get("age"),
            is_aggregate=is_aggregate_team(team),
        )
