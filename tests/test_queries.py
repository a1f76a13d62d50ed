"""
Tests for the read helpers behind the last-updated banner and the
efficiency/usage chart.
"""

from datetime import datetime, timezone

from sportsdeck_data.core.types import League, Phase, StatCategory
from sportsdeck_data.pipeline.merger import SeasonStatMerger
from sportsdeck_data.pipeline.resolver import resolve_player_group
from sportsdeck_data.queries import efficiency_usage_points, get_last_update

STAMP = datetime(2025, 1, 15, 18, 0, tzinfo=timezone.utc)


class TestGetLastUpdate:
    def test_global_league_and_season_lookups(self, repos):
        repos.system.set("lastUpdateTime", {"formatted_timestamp": "cycle"}, STAMP)
        repos.system.set("lastUpdate_NBA", {"formatted_timestamp": "league", "success": True}, STAMP)
        repos.system.set("lastUpdate_NBA_2025", {"formatted_timestamp": "season", "success": False}, STAMP)

        assert get_last_update(repos.system)["formatted_timestamp"] == "cycle"
        assert get_last_update(repos.system, League.NBA)["success"] is True
        assert get_last_update(repos.system, League.NBA, 2025)["success"] is False

    def test_phase_lookup(self, repos):
        repos.system.set("lastUpdate_NBA_2025_regular", {"success": True}, STAMP)
        repos.system.set("lastUpdate_NBA_2025_playoff", {"success": False}, STAMP)

        assert get_last_update(repos.system, League.NBA, 2025, Phase.regular) == {"success": True}
        assert get_last_update(repos.system, League.NBA, 2025, "playoff") == {"success": False}

    def test_missing_entry(self, repos):
        assert get_last_update(repos.system, League.EPL) is None

    def test_set_overwrites(self, repos):
        repos.system.set("lastUpdate_EPL", {"success": False}, STAMP)
        repos.system.set("lastUpdate_EPL", {"success": True}, STAMP)

        assert get_last_update(repos.system, League.EPL) == {"success": True}


class TestEfficiencyUsagePoints:
    def merge_advanced(self, repos, nba_record, nba_run, player_id, games, **stats):
        merger = SeasonStatMerger(repos.stats)
        record = nba_record(
            player_id, "MIA", 100, games,
            name=f"Player {player_id}", category=StatCategory.advanced, **stats,
        )
        merger.merge(resolve_player_group([record]), StatCategory.advanced, nba_run())

    def test_points_for_qualified_players(self, repos, nba_record, nba_run):
        self.merge_advanced(repos, nba_record, nba_run, "1", 60, ts_percent=0.61, usage_percent=28.0, per=23.5)
        self.merge_advanced(repos, nba_record, nba_run, "2", 45, ts_percent=0.55, usage_percent=19.0, per=14.1)

        points = efficiency_usage_points(repos.stats, 2025)

        assert [p["player_id"] for p in points] == ["1", "2"]
        assert points[0] == {
            "player_id": "1",
            "name": "Player 1",
            "team": "MIA",
            "position": "SF",
            "ts_percent": 0.61,
            "usage_percent": 28.0,
            "per": 23.5,
            "games": 60,
        }

    def test_skips_players_under_min_games(self, repos, nba_record, nba_run):
        self.merge_advanced(repos, nba_record, nba_run, "1", 60, ts_percent=0.61, usage_percent=28.0)
        self.merge_advanced(repos, nba_record, nba_run, "2", 12, ts_percent=0.70, usage_percent=12.0)

        assert [p["player_id"] for p in efficiency_usage_points(repos.stats, 2025)] == ["1"]
        assert len(efficiency_usage_points(repos.stats, 2025, min_games=10)) == 2

    def test_skips_players_without_advanced_block(self, repos, nba_record, nba_run):
        merger = SeasonStatMerger(repos.stats)
        merger.merge(resolve_player_group([nba_record("3", "LAL", 5, 70)]), StatCategory.totals, nba_run())

        assert efficiency_usage_points(repos.stats, 2025) == []

    def test_phase_is_respected(self, repos, nba_record, nba_run):
        self.merge_advanced(repos, nba_record, nba_run, "1", 60, ts_percent=0.61, usage_percent=28.0)

        assert efficiency_usage_points(repos.stats, 2025, Phase.playoff) == []
