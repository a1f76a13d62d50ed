"""
Pydantic models for sportsdeck entities.

These models are used for:
- Validating provider payloads into typed stat lines (one variant per league/category)
- Type-safe rows coming back from the repositories
- The JSON stored in stat blocks and the system ledger
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, computed_field
from pydantic.alias_generators import to_camel

from .types import League, Phase, StatCategory


# =============================================================================
# Stat line variants
# =============================================================================


class StatLine(BaseModel):
    """Base for every per-category stat block."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def game_count(self) -> int:
        """Games the line covers, used for per-game figures and tie-breaks."""
        return 0

    def to_block(self) -> dict[str, Any]:
        """Serialize to the JSON stored in a category block."""
        return self.model_dump(mode="json")


class NbaTotals(StatLine):
    """Season totals from the NBA ``PlayerDataTotals`` endpoints."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    games: int = 0
    games_started: Optional[int] = None
    minutes_pg: Optional[float] = None
    field_goals: Optional[int] = None
    field_attempts: Optional[int] = None
    field_percent: Optional[float] = None
    three_fg: Optional[int] = None
    three_attempts: Optional[int] = None
    three_percent: Optional[float] = None
    two_fg: Optional[int] = None
    two_attempts: Optional[int] = None
    two_percent: Optional[float] = None
    effect_fg_percent: Optional[float] = None
    ft: Optional[int] = None
    ft_attempts: Optional[int] = None
    ft_percent: Optional[float] = None
    offensive_rb: Optional[int] = None
    defensive_rb: Optional[int] = None
    total_rb: Optional[int] = None
    assists: Optional[int] = None
    steals: Optional[int] = None
    blocks: Optional[int] = None
    turnovers: Optional[int] = None
    personal_fouls: Optional[int] = None
    points: Optional[int] = None

    @property
    def game_count(self) -> int:
        return self.games or 0


class NbaAdvanced(StatLine):
    """Advanced metrics from the NBA ``PlayerDataAdvanced`` endpoints."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    games: int = 0
    minutes_played: Optional[int] = None
    per: Optional[float] = None
    ts_percent: Optional[float] = None
    three_par: Optional[float] = Field(default=None, alias="threePAR")
    ftr: Optional[float] = None
    offensive_rb_percent: Optional[float] = Field(default=None, alias="offensiveRBPercent")
    defensive_rb_percent: Optional[float] = Field(default=None, alias="defensiveRBPercent")
    total_rb_percent: Optional[float] = Field(default=None, alias="totalRBPercent")
    assist_percent: Optional[float] = None
    steal_percent: Optional[float] = None
    block_percent: Optional[float] = None
    turnover_percent: Optional[float] = None
    usage_percent: Optional[float] = None
    offensive_ws: Optional[float] = Field(default=None, alias="offensiveWS")
    defensive_ws: Optional[float] = Field(default=None, alias="defensiveWS")
    win_shares: Optional[float] = None
    win_shares_per: Optional[float] = None
    offensive_box: Optional[float] = None
    defensive_box: Optional[float] = None
    box: Optional[float] = None
    vorp: Optional[float] = None

    @property
    def game_count(self) -> int:
        return self.games or 0


class GoalStats(BaseModel):
    total: Optional[int] = None
    assists: Optional[int] = None
    conceded: Optional[int] = None
    saves: Optional[int] = None


class CardStats(BaseModel):
    yellow: Optional[int] = None
    yellowred: Optional[int] = None
    red: Optional[int] = None


class ShotStats(BaseModel):
    total: Optional[int] = None
    on: Optional[int] = None


class PassStats(BaseModel):
    total: Optional[int] = None
    key: Optional[int] = None
    accuracy: Optional[float] = None


class TackleStats(BaseModel):
    total: Optional[int] = None
    blocks: Optional[int] = None
    interceptions: Optional[int] = None


class DuelStats(BaseModel):
    total: Optional[int] = None
    won: Optional[int] = None


class DribbleStats(BaseModel):
    attempts: Optional[int] = None
    success: Optional[int] = None
    past: Optional[int] = None


class FoulStats(BaseModel):
    drawn: Optional[int] = None
    committed: Optional[int] = None


class PenaltyStats(BaseModel):
    won: Optional[int] = None
    committed: Optional[int] = None
    scored: Optional[int] = None
    missed: Optional[int] = None
    saved: Optional[int] = None


class SoccerSeasonStats(StatLine):
    """One club-season of soccer statistics."""

    appearances: int = 0
    lineups: Optional[int] = None
    minutes: Optional[int] = None
    rating: Optional[float] = None
    goals: GoalStats = Field(default_factory=GoalStats)
    cards: CardStats = Field(default_factory=CardStats)
    shots: ShotStats = Field(default_factory=ShotStats)
    passes: PassStats = Field(default_factory=PassStats)
    tackles: TackleStats = Field(default_factory=TackleStats)
    duels: DuelStats = Field(default_factory=DuelStats)
    dribbles: DribbleStats = Field(default_factory=DribbleStats)
    fouls: FoulStats = Field(default_factory=FoulStats)
    penalty: PenaltyStats = Field(default_factory=PenaltyStats)

    @property
    def game_count(self) -> int:
        return self.appearances or 0


class NflSeasonStats(StatLine):
    """Season aggregates from the BallDontLie NFL ``season_stats`` endpoint."""

    games_played: int = 0
    passing_yards: Optional[int] = None
    passing_touchdowns: Optional[int] = None
    passing_interceptions: Optional[int] = None
    rushing_yards: Optional[int] = None
    rushing_touchdowns: Optional[int] = None
    receptions: Optional[int] = None
    receiving_yards: Optional[int] = None
    receiving_touchdowns: Optional[int] = None
    total_tackles: Optional[int] = None
    defensive_sacks: Optional[float] = None
    defensive_interceptions: Optional[int] = None

    @property
    def game_count(self) -> int:
        return self.games_played or 0


AnyStatLine = Union[NbaTotals, NbaAdvanced, SoccerSeasonStats, NflSeasonStats]

STAT_LINE_TYPES: dict[tuple[League, StatCategory], type[StatLine]] = {
    (League.NBA, StatCategory.totals): NbaTotals,
    (League.NBA, StatCategory.advanced): NbaAdvanced,
    (League.EPL, StatCategory.season): SoccerSeasonStats,
    (League.NFL, StatCategory.season): NflSeasonStats,
}


def parse_stat_block(league: League, category: StatCategory, data: dict[str, Any]) -> StatLine:
    """
    Rebuild a typed stat line from a stored category block.

    Raises:
        KeyError: If the league does not keep the given category
    """
    model = STAT_LINE_TYPES[(league, category)]
    return model.model_validate(data)


# =============================================================================
# Teams
# =============================================================================


class Standings(BaseModel):
    """Standings snapshot kept on the team row."""

    rank: Optional[int] = None
    points: Optional[int] = None
    played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @computed_field
    @property
    def win_percentage(self) -> float:
        return self.wins / self.played if self.played else 0.0


class TeamModel(BaseModel):
    """Team master record."""

    league: League
    team_id: str
    name: str
    display_name: str
    abbreviation: Optional[str] = None
    city: Optional[str] = None
    logo: Optional[str] = None
    standings: Optional[Standings] = None


# =============================================================================
# Players
# =============================================================================


class PlayerSummary(BaseModel):
    """Lightweight per-player row used for browsing and team rosters."""

    league: League
    player_id: str
    name: str
    team_id: Optional[str] = None
    position: Optional[str] = None
    number: Optional[str] = None
    age: Optional[int] = None
    nationality: Optional[str] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    image: Optional[str] = None
    detail_ref: Optional[str] = None
    stats: dict[str, Any] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None

    @computed_field
    @property
    def summary_id(self) -> str:
        """Public identifier, e.g. ``nba_1234``."""
        return f"{self.league.value.lower()}_{self.player_id}"


class SeasonEntry(BaseModel):
    """One (season, phase) entry of a player's detail document."""

    season: int
    phase: Phase
    team: Optional[str] = None
    team_id: Optional[str] = None
    position: Optional[str] = None
    age: Optional[int] = None
    categories: dict[StatCategory, dict[str, Any]] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None

    def category(self, category: StatCategory) -> Optional[dict[str, Any]]:
        """Return a category block, or None when it was never filled."""
        block = self.categories.get(category)
        return block or None


class PlayerStatsDocument(BaseModel):
    """
    Per-player detail document: every season/phase the player has data for.

    Entries are indexed by ``(season, phase)`` on construction, so lookups do
    not scan the entry list.
    """

    league: League
    player_id: str
    name: str
    profile: dict[str, Any] = Field(default_factory=dict)
    entries: list[SeasonEntry] = Field(default_factory=list)
    last_updated: Optional[datetime] = None

    _index: dict[tuple[int, Phase], SeasonEntry] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._index = {(e.season, e.phase): e for e in self.entries}

    def entry(self, season: int, phase: Phase = Phase.regular) -> Optional[SeasonEntry]:
        return self._index.get((season, phase))

    def seasons(self, phase: Phase = Phase.regular) -> list[int]:
        """Seasons with an entry for the phase, newest first."""
        return sorted((s for s, p in self._index if p == phase), reverse=True)

    def resolve_entry(
        self,
        season: Optional[int] = None,
        phase: Phase = Phase.regular,
    ) -> Optional[SeasonEntry]:
        """Return the requested season, falling back to the most recent one."""
        if season is not None:
            found = self.entry(season, phase)
            if found is not None:
                return found
        available = self.seasons(phase)
        return self._index[(available[0], phase)] if available else None


# =============================================================================
# System ledger
# =============================================================================


class LedgerEntry(BaseModel):
    """Value stored under a ``system_info`` ledger key."""

    timestamp: datetime
    formatted_timestamp: str
    success: Optional[bool] = None
    duration: Optional[float] = None
    season: Optional[int] = None
    phase: Optional[Phase] = None
