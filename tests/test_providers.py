"""
Tests for provider row normalization.
"""

import pytest

from sportsdeck_data.core.models import TeamModel
from sportsdeck_data.core.types import League, Phase, StatCategory
from sportsdeck_data.providers.api_football import ApiFootballClient
from sportsdeck_data.providers.balldontlie_nfl import BallDontLieNFL
from sportsdeck_data.providers.base import MalformedResponseError
from sportsdeck_data.providers.nba_api import (
    NbaStatsClient,
    is_aggregate_team,
    nba_team_id,
    nba_teams,
)

NBA_TOTALS_ROW = {
    "id": 1234,
    "playerName": "Jimmy Example",
    "position": "SF",
    "age": 29,
    "games": 60,
    "gamesStarted": 58,
    "minutesPg": 33.9,
    "fieldGoals": 520,
    "fieldAttempts": 1050,
    "fieldPercent": 0.495,
    "threeFg": 90,
    "threeAttempts": 250,
    "threePercent": 0.36,
    "effectFgPercent": 0.538,
    "ft": 300,
    "ftAttempts": 360,
    "ftPercent": 0.833,
    "totalRb": 330,
    "assists": 280,
    "steals": 70,
    "blocks": 25,
    "turnovers": 120,
    "personalFouls": 100,
    "points": 1430,
    "team": "MIA",
    "season": 2025,
    "playerId": "exampji01",
}

NBA_ADVANCED_ROW = {
    "id": 5678,
    "playerName": "Jimmy Example",
    "position": "SF",
    "age": 29,
    "games": 60,
    "minutesPlayed": 2034,
    "per": 21.4,
    "tsPercent": 0.598,
    "threePAR": 0.238,
    "offensiveRBPercent": 4.1,
    "usagePercent": 24.7,
    "offensiveWS": 5.2,
    "winShares": 7.9,
    "vorp": 3.1,
    "team": "2TM",
    "season": 2025,
    "playerId": "exampji01",
}


class TestNbaProvider:
    def test_team_ids_include_alternate_abbreviations(self):
        assert nba_team_id("LAL") == "14"
        assert nba_team_id("BKN") == nba_team_id("BRK") == "3"
        assert nba_team_id("PHX") == "24"
        assert nba_team_id("2TM") is None
        assert nba_team_id(None) is None

    def test_thirty_teams(self):
        teams = nba_teams()
        assert len(teams) == 30
        assert {t.team_id for t in teams} == {str(i) for i in range(1, 31)}

    @pytest.mark.parametrize("label, expected", [("2TM", True), ("3TM", True), ("TOT", False), ("LAL", False), (None, False)])
    def test_aggregate_labels(self, label, expected):
        assert is_aggregate_team(label) is expected

    def test_endpoint_paths(self):
        client = NbaStatsClient()
        assert client.endpoint(StatCategory.totals, Phase.regular, 2025).path == "/PlayerDataTotals/season/2025"
        assert client.endpoint(StatCategory.advanced, Phase.playoff, 2024).path == (
            "/PlayerDataAdvancedPlayoffs/season/2024"
        )

    def test_totals_row(self):
        record = NbaStatsClient().to_record(NBA_TOTALS_ROW, StatCategory.totals, 2025)

        assert record.player_id == "exampji01"
        assert record.player_name == "Jimmy Example"
        assert record.record_id == 1234
        assert record.team_id == "16"
        assert record.is_aggregate is False
        assert record.games == 60
        assert record.stats.points == 1430
        assert record.stats.effect_fg_percent == 0.538
        assert record.stats.to_block()["total_rb"] == 330

    def test_advanced_row_irregular_field_names(self):
        record = NbaStatsClient().to_record(NBA_ADVANCED_ROW, StatCategory.advanced, 2025)

        assert record.is_aggregate is True
        assert record.stats.three_par == 0.238
        assert record.stats.offensive_rb_percent == 4.1
        assert record.stats.offensive_ws == 5.2
        assert record.stats.usage_percent == 24.7


class TestApiFootballProvider:
    def test_parse_standings(self, standings_body):
        teams = ApiFootballClient.parse_standings(standings_body)

        assert [t.name for t in teams] == ["Liverpool", "Arsenal"]
        assert teams[0].team_id == "40"
        assert teams[0].standings.rank == 1
        assert teams[0].standings.wins == 25
        assert teams[0].standings.win_percentage == pytest.approx(25 / 38)

    def test_parse_standings_rejects_empty_body(self):
        with pytest.raises(MalformedResponseError):
            ApiFootballClient.parse_standings({"response": []})

    def test_to_record_uses_league_entry(self, squad_row):
        client = ApiFootballClient("key")
        team = TeamModel(league=League.EPL, team_id="40", name="Liverpool", display_name="Liverpool")
        raw = squad_row(7, 30)
        raw["statistics"].insert(0, {
            "team": {"id": 40},
            "league": {"id": 2, "season": 2024},  # cup competition
            "games": {"appearences": 6},
        })

        record = client.to_record(raw, team, 2024, record_id=3)

        assert record.player_id == "7"
        assert record.team == "Liverpool"
        assert record.team_id == "40"
        assert record.record_id == 3
        assert record.games == 30
        assert record.stats.rating == 7.1
        assert record.stats.penalty.committed == 2
        assert record.profile["nationality"] == "England"
        assert record.profile["number"] == 8

    def test_to_record_without_statistics(self):
        client = ApiFootballClient("key")
        team = TeamModel(league=League.EPL, team_id="40", name="Liverpool", display_name="Liverpool")

        assert client.to_record({"player": {"id": 1}, "statistics": []}, team, 2024, 1) is None

    def test_is_configured(self):
        assert ApiFootballClient("key").is_configured() is True
        assert ApiFootballClient(None).is_configured() is False


class TestBallDontLieProvider:
    def test_season_stats_row(self):
        raw = {
            "player": {
                "id": 19,
                "first_name": "Pat",
                "last_name": "Example",
                "position_abbreviation": "QB",
                "jersey_number": "15",
                "team": {"id": 17, "abbreviation": "KC"},
            },
            "season": 2024,
            "games_played": 16,
            "passing_yards": 3928,
            "passing_touchdowns": 26,
        }

        record = BallDontLieNFL.to_record(raw, 2024)

        assert record.player_id == "19"
        assert record.player_name == "Pat Example"
        assert record.team_id == "17"
        assert record.position == "QB"
        assert record.games == 16
        assert record.stats.passing_yards == 3928
